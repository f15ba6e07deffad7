from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .question_types import EMAIL_PATTERN, QUESTION_TYPES, check_question_definition

MAX_QUESTIONS = 16
MAX_TAG_LENGTH = 50

Bound = Union[int, float, str]


# --- Question definitions ---


class QuestionBase(BaseModel):
    title: str = Field(..., min_length=3, max_length=200)
    description: Optional[str] = None
    type: str
    required: bool = False
    options: Optional[List[str]] = None
    min: Optional[Bound] = None
    max: Optional[Bound] = None

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("type")
    @classmethod
    def check_type(cls, v):
        if v not in QUESTION_TYPES:
            raise ValueError(f"Invalid question type, expected one of {', '.join(QUESTION_TYPES)}")
        return v

    @model_validator(mode="after")
    def check_definition(self):
        check_question_definition(self.type, self.options, self.min, self.max)
        return self


class QuestionCreate(QuestionBase):
    pass


class QuestionRead(QuestionBase):
    id: int
    position: int

    model_config = ConfigDict(from_attributes=True)


class QuestionTypeInfo(BaseModel):
    type: str
    shape: str
    format_check: Optional[str] = None
    has_bounds: bool
    has_options: bool


# --- Templates ---


class TemplateBase(BaseModel):
    title: str = Field(..., min_length=3, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    topic: Literal["Education", "Quiz", "Other"]
    is_public: bool = True
    tags: List[str] = Field(default_factory=list)

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v):
        seen = []
        for tag in v:
            name = tag.strip().lower()
            if not name:
                continue
            if len(name) > MAX_TAG_LENGTH:
                raise ValueError(f"Tags must be at most {MAX_TAG_LENGTH} characters")
            if name not in seen:
                seen.append(name)
        return seen


class TemplateCreate(TemplateBase):
    questions: List[QuestionCreate] = Field(..., min_length=1, max_length=MAX_QUESTIONS)


class TemplateUpdate(TemplateCreate):
    pass


class TemplateRead(TemplateBase):
    id: int
    status: str
    user_id: int
    author_name: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    questions: List[QuestionRead] = []
    likes: int = 0
    comments: int = 0


class TemplateListItem(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    topic: str
    tags: List[str] = []
    status: str
    is_public: bool
    user_id: int
    author_name: Optional[str] = None
    created_at: datetime
    question_count: int
    likes: int = 0


class TemplatePage(BaseModel):
    items: List[TemplateListItem]
    total: int
    page: int
    page_size: int


class TagCount(BaseModel):
    name: str
    template_count: int


# --- Responses ---


class ResponseSubmit(BaseModel):
    answers: Dict[str, Any]


class ResponseRead(BaseModel):
    id: int
    template_id: int
    user_id: Optional[int] = None
    answers: Dict[str, Any]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ValidationResult(BaseModel):
    valid: bool
    errors: Dict[str, str] = {}


class ErrorBody(BaseModel):
    error_code: str
    message: str
    errors: Optional[Dict[str, str]] = None


# --- Likes and comments ---


class LikeToggleResponse(BaseModel):
    liked: bool
    likes: int


class CommentCreate(BaseModel):
    content: str = Field(..., max_length=2000)

    @field_validator("content")
    @classmethod
    def not_blank(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Comment must not be empty")
        return v


class CommentRead(BaseModel):
    id: int
    template_id: int
    user_id: int
    author_name: Optional[str] = None
    content: str
    created_at: datetime


# --- Users and auth ---


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str
    password: str = Field(..., min_length=6)

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        v = v.strip().lower()
        if not EMAIL_PATTERN.fullmatch(v):
            raise ValueError("Invalid email address")
        return v


class LoginRequest(BaseModel):
    email: str
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserRead(BaseModel):
    id: int
    name: str
    email: str
    role: str
    is_blocked: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class UserRoleUpdate(BaseModel):
    role: Literal["user", "admin"]


class UserBlockUpdate(BaseModel):
    is_blocked: bool
