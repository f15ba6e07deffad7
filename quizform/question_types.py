"""
Registry of the supported question types.

Every type knows the runtime shape it accepts, how to turn a raw submitted
value into its typed payload and, for number/date, how bounds apply. The
registry is the only place these rules live: template definitions, the
response validator and the form renderer (via ``describe_question_types``)
all read from it.
"""

import math
import re
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AnyUrl, TypeAdapter, ValidationError


class ErrorKind(str, Enum):
    """Abstract field-level error kinds. Human readable text is up to the client."""

    REQUIRED_MISSING = "RequiredMissing"
    FORMAT_INVALID = "FormatInvalid"
    OUT_OF_RANGE = "OutOfRange"
    NOT_AN_ALLOWED_OPTION = "NotAnAllowedOption"
    UNKNOWN_QUESTION = "UnknownQuestion"


class FormatInvalid(ValueError):
    """Raised by ``QuestionType.parse`` when a value has the wrong shape or format."""


TEXT_MAX_LENGTH = 1000

# Browser regex syntax, as served to the form renderer
EMAIL_FORMAT = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"
PHONE_FORMAT = r"^\+?[\d\s-]{10,}$"

# Same rules for Python's re: \d is ASCII only in the browser while \s is the
# ECMAScript whitespace set. Callers use fullmatch.
_WHITESPACE = r"\t\n\v\f\r \u00a0\u1680\u2000-\u200a\u2028\u2029\u202f\u205f\u3000\ufeff"
EMAIL_PATTERN = re.compile(rf"[^{_WHITESPACE}@]+@[^{_WHITESPACE}@]+\.[^{_WHITESPACE}@]+")
PHONE_PATTERN = re.compile(rf"\+?[0-9{_WHITESPACE}-]{{10,}}")


def utf16_length(value: str) -> int:
    """Length as the browser counts it (UTF-16 code units)."""
    return len(value.encode("utf-16-le")) // 2


_url_adapter = TypeAdapter(AnyUrl)


class QuestionType:
    tag: str = ""
    shape: str = "text"
    format_check: Optional[str] = None
    has_bounds: bool = False
    has_options: bool = False

    def parse(self, value: Any) -> Any:
        if not isinstance(value, str):
            raise FormatInvalid(f"{self.tag} expects text")
        return value

    def within_bounds(self, payload: Any, minimum: Any, maximum: Any) -> bool:
        if not self.has_bounds:
            return True
        if minimum is not None and payload < self.parse(minimum):
            return False
        if maximum is not None and payload > self.parse(maximum):
            return False
        return True

    def describe(self) -> Dict[str, Any]:
        return {
            "type": self.tag,
            "shape": self.shape,
            "format_check": self.format_check,
            "has_bounds": self.has_bounds,
            "has_options": self.has_options,
        }


class StringType(QuestionType):
    tag = "string"


class TextType(QuestionType):
    tag = "text"
    format_check = f"length <= {TEXT_MAX_LENGTH}"

    def parse(self, value: Any) -> str:
        value = super().parse(value)
        if utf16_length(value) > TEXT_MAX_LENGTH:
            raise FormatInvalid("text is too long")
        return value


class NumberType(QuestionType):
    tag = "number"
    shape = "number"
    format_check = "real number"
    has_bounds = True

    def parse(self, value: Any) -> float:
        # bool is an int subclass, a checkbox value is not a number
        if isinstance(value, bool):
            raise FormatInvalid("number expected, got boolean")
        if isinstance(value, (int, float)):
            number = float(value)
        elif isinstance(value, str):
            try:
                number = float(value.strip())
            except ValueError:
                raise FormatInvalid(f"not a number: {value!r}")
        else:
            raise FormatInvalid("number expected")
        if not math.isfinite(number):
            raise FormatInvalid("number must be finite")
        return number


class CheckboxType(QuestionType):
    tag = "checkbox"
    shape = "boolean"

    def parse(self, value: Any) -> bool:
        if not isinstance(value, bool):
            raise FormatInvalid("checkbox expects true or false")
        return value


class RadioType(QuestionType):
    tag = "radio"
    has_options = True


class SelectType(QuestionType):
    tag = "select"
    has_options = True


class DateType(QuestionType):
    tag = "date"
    shape = "date"
    format_check = "ISO calendar date"
    has_bounds = True

    def parse(self, value: Any) -> date:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        value = super().parse(value).strip()
        try:
            return date.fromisoformat(value)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        except ValueError:
            raise FormatInvalid(f"not a calendar date: {value!r}")


class EmailType(QuestionType):
    tag = "email"
    format_check = EMAIL_FORMAT

    def parse(self, value: Any) -> str:
        value = super().parse(value)
        if not EMAIL_PATTERN.fullmatch(value):
            raise FormatInvalid("not an email address")
        return value


class PhoneType(QuestionType):
    tag = "phone"
    format_check = PHONE_FORMAT

    def parse(self, value: Any) -> str:
        value = super().parse(value)
        if not PHONE_PATTERN.fullmatch(value):
            raise FormatInvalid("not a phone number")
        return value


class UrlType(QuestionType):
    tag = "url"
    format_check = "absolute URL"

    def parse(self, value: Any) -> str:
        value = super().parse(value)
        try:
            url = _url_adapter.validate_python(value)
        except ValidationError:
            raise FormatInvalid(f"not a URL: {value!r}")
        if not url.host:
            raise FormatInvalid(f"URL has no host: {value!r}")
        return value


_REGISTRY: Dict[str, QuestionType] = {
    qt.tag: qt
    for qt in (
        StringType(),
        TextType(),
        NumberType(),
        CheckboxType(),
        RadioType(),
        SelectType(),
        DateType(),
        EmailType(),
        PhoneType(),
        UrlType(),
    )
}

QUESTION_TYPES: List[str] = list(_REGISTRY)


def get_question_type(tag: str) -> QuestionType:
    try:
        return _REGISTRY[tag]
    except KeyError:
        raise ValueError(
            f"Unknown question type {tag!r}, expected one of {', '.join(QUESTION_TYPES)}"
        ) from None


def describe_question_types() -> List[Dict[str, Any]]:
    return [qt.describe() for qt in _REGISTRY.values()]


def check_question_definition(
    tag: str, options: Optional[List[str]], minimum: Any, maximum: Any
) -> None:
    """Raises ValueError if a question definition does not fit its type."""
    question_type = get_question_type(tag)

    if question_type.has_options:
        if not options:
            raise ValueError(f"{tag} questions need at least one option")
        if any(not isinstance(o, str) or not o.strip() for o in options):
            raise ValueError("options must be non-empty text")
    elif options:
        raise ValueError(f"{tag} questions do not take options")

    if minimum is None and maximum is None:
        return
    if not question_type.has_bounds:
        raise ValueError(f"{tag} questions do not take min/max")
    try:
        low = question_type.parse(minimum) if minimum is not None else None
        high = question_type.parse(maximum) if maximum is not None else None
    except FormatInvalid as e:
        raise ValueError(f"invalid bound for {tag} question: {e}") from e
    if low is not None and high is not None and low > high:
        raise ValueError("min must not be greater than max")
