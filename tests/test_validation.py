from types import SimpleNamespace

from quizform.question_types import ErrorKind
from quizform.schemas import QuestionRead
from quizform.validation import VALID, collect_errors, is_acceptable, validate_answers


def question(id, type="string", required=False, options=None, min=None, max=None):
    return SimpleNamespace(
        id=id, type=type, required=required, options=options, min=min, max=max
    )


class TestRequired:
    def test_required_absent(self):
        verdicts = validate_answers([question(1, required=True)], {})
        assert verdicts == {"1": ErrorKind.REQUIRED_MISSING}
        assert not is_acceptable(verdicts)

    def test_required_empty_string(self):
        verdicts = validate_answers([question(1, type="email", required=True)], {"1": ""})
        assert verdicts["1"] == ErrorKind.REQUIRED_MISSING

    def test_optional_absent_is_valid(self):
        verdicts = validate_answers([question(1, type="number", min=1, max=10)], {})
        assert verdicts == {"1": VALID}
        assert is_acceptable(verdicts)

    def test_optional_empty_skips_format_check(self):
        verdicts = validate_answers([question(1, type="email")], {"1": ""})
        assert verdicts["1"] is VALID

    def test_unchecked_checkbox_counts_as_answered(self):
        verdicts = validate_answers([question(1, type="checkbox", required=True)], {"1": False})
        assert verdicts["1"] is VALID


class TestNumber:
    def test_bounds(self):
        q = [question(1, type="number", min=1, max=10)]
        assert validate_answers(q, {"1": 0})["1"] == ErrorKind.OUT_OF_RANGE
        assert validate_answers(q, {"1": 5})["1"] is VALID
        assert validate_answers(q, {"1": "abc"})["1"] == ErrorKind.FORMAT_INVALID

    def test_bounds_are_inclusive(self):
        q = [question(1, type="number", min=1, max=10)]
        assert validate_answers(q, {"1": 1})["1"] is VALID
        assert validate_answers(q, {"1": "10"})["1"] is VALID
        assert validate_answers(q, {"1": 10.5})["1"] == ErrorKind.OUT_OF_RANGE

    def test_open_ended_bounds(self):
        q = [question(1, type="number", min=0)]
        assert validate_answers(q, {"1": 1e9})["1"] is VALID
        assert validate_answers(q, {"1": -1})["1"] == ErrorKind.OUT_OF_RANGE


class TestFormats:
    def test_email(self):
        q = [question(1, type="email")]
        assert validate_answers(q, {"1": "user@example.com"})["1"] is VALID
        assert validate_answers(q, {"1": "not-an-email"})["1"] == ErrorKind.FORMAT_INVALID
        assert validate_answers(q, {"1": "user@example.com\n"})["1"] == ErrorKind.FORMAT_INVALID

    def test_phone_digits_and_anchoring(self):
        q = [question(1, type="phone", required=True)]
        assert validate_answers(q, {"1": "555 123 4567"})["1"] is VALID
        assert validate_answers(q, {"1": "5551234567\n"})["1"] == ErrorKind.FORMAT_INVALID
        arabic_indic = "\u0665\u0665\u0665\u0661\u0662\u0663\u0664\u0665\u0666\u0667"
        assert validate_answers(q, {"1": arabic_indic})["1"] == ErrorKind.FORMAT_INVALID

    def test_date_range(self):
        q = [question(1, type="date", min="2024-01-01", max="2024-12-31")]
        assert validate_answers(q, {"1": "2024-06-15"})["1"] is VALID
        assert validate_answers(q, {"1": "2025-01-01"})["1"] == ErrorKind.OUT_OF_RANGE
        assert validate_answers(q, {"1": "June"})["1"] == ErrorKind.FORMAT_INVALID

    def test_wrong_shape(self):
        q = [question(1, type="checkbox"), question(2, type="string")]
        verdicts = validate_answers(q, {"1": "true", "2": 12})
        assert verdicts == {"1": ErrorKind.FORMAT_INVALID, "2": ErrorKind.FORMAT_INVALID}


class TestOptions:
    def test_radio(self):
        q = [question(1, type="radio", options=["A", "B"])]
        assert validate_answers(q, {"1": "C"})["1"] == ErrorKind.NOT_AN_ALLOWED_OPTION
        assert validate_answers(q, {"1": "A"})["1"] is VALID

    def test_select_is_case_sensitive(self):
        q = [question(1, type="select", options=["Yes", "No"])]
        assert validate_answers(q, {"1": "yes"})["1"] == ErrorKind.NOT_AN_ALLOWED_OPTION


class TestAggregation:
    QUESTIONS = [
        question(1, required=True),
        question(2, type="number", min=1, max=10),
        question(3, type="email"),
        question(4, type="radio", options=["A", "B"]),
    ]

    def test_reports_every_error(self):
        answers = {"2": 11, "3": "nope", "4": "C"}
        verdicts = validate_answers(self.QUESTIONS, answers)
        assert collect_errors(verdicts) == {
            "1": "RequiredMissing",
            "2": "OutOfRange",
            "3": "FormatInvalid",
            "4": "NotAnAllowedOption",
        }

    def test_declared_order(self):
        verdicts = validate_answers(self.QUESTIONS, {"4": "A", "1": "x"})
        assert list(verdicts) == ["1", "2", "3", "4"]

    def test_unknown_question(self):
        verdicts = validate_answers(self.QUESTIONS, {"1": "x", "99": "extra"})
        assert verdicts["99"] == ErrorKind.UNKNOWN_QUESTION
        assert not is_acceptable(verdicts)

    def test_integer_keys(self):
        verdicts = validate_answers(self.QUESTIONS, {1: "x", 2: 3})
        assert is_acceptable(verdicts)

    def test_same_input_same_result(self):
        answers = {"1": "", "2": "abc", "4": "A"}
        first = validate_answers(self.QUESTIONS, answers)
        second = validate_answers(self.QUESTIONS, answers)
        assert first == second
        assert answers == {"1": "", "2": "abc", "4": "A"}

    def test_accepts_schema_objects(self):
        questions = [
            QuestionRead(id=7, position=0, title="Score", type="number", min=1, max=5),
        ]
        assert validate_answers(questions, {"7": 6}) == {"7": ErrorKind.OUT_OF_RANGE}
