"""
Response validation.

``validate_answers`` is the one implementation of the answer rules. The
submission path uses it as the authority and the dry-run endpoint serves the
same verdicts to the form renderer for inline errors. It is a pure function:
no I/O and no mutation of its arguments.
"""

from enum import Enum
from typing import Any, Dict, Iterable, Mapping

from .question_types import ErrorKind, FormatInvalid, get_question_type


class Valid(str, Enum):
    VALID = "Valid"


VALID = Valid.VALID


def is_empty(value: Any) -> bool:
    return value is None or value == "" or value == []


def check_answer(question: Any, value: Any):
    """Verdict for a single question/value pair (``VALID`` or an ``ErrorKind``)."""
    if is_empty(value):
        return ErrorKind.REQUIRED_MISSING if question.required else VALID

    question_type = get_question_type(question.type)
    try:
        payload = question_type.parse(value)
    except FormatInvalid:
        return ErrorKind.FORMAT_INVALID

    if not question_type.within_bounds(payload, question.min, question.max):
        return ErrorKind.OUT_OF_RANGE

    if question_type.has_options and payload not in (question.options or []):
        return ErrorKind.NOT_AN_ALLOWED_OPTION

    return VALID


def validate_answers(questions: Iterable[Any], answers: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Checks ``answers`` (keyed by question id as text) against ``questions``.

    Questions can be ORM rows or schemas, anything with ``id``, ``type``,
    ``required``, ``options``, ``min`` and ``max``. Returns a verdict for every
    question in declared order, followed by ``UnknownQuestion`` for answer keys
    that match no question. Nothing short-circuits, so the caller gets every
    violation at once.
    """
    submitted = {str(key): value for key, value in answers.items()}

    verdicts: Dict[str, Any] = {}
    for question in questions:
        key = str(question.id)
        verdicts[key] = check_answer(question, submitted.get(key))

    for key in submitted:
        if key not in verdicts:
            verdicts[key] = ErrorKind.UNKNOWN_QUESTION

    return verdicts


def collect_errors(verdicts: Mapping[str, Any]) -> Dict[str, str]:
    return {key: verdict.value for key, verdict in verdicts.items() if verdict is not VALID}


def is_acceptable(verdicts: Mapping[str, Any]) -> bool:
    return all(verdict is VALID for verdict in verdicts.values())
