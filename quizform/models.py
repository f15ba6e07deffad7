from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


TEMPLATE_STATUS_PENDING = "pending"
TEMPLATE_STATUS_ACTIVE = "active"
TEMPLATE_STATUSES = (TEMPLATE_STATUS_PENDING, TEMPLATE_STATUS_ACTIVE)

ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLES = (ROLE_USER, ROLE_ADMIN)


template_tags = Table(
    "template_tags",
    Base.metadata,
    Column(
        "template_id",
        Integer,
        ForeignKey("templates.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(String, default=ROLE_USER, nullable=False)
    is_blocked = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    templates = relationship(
        "Template", back_populates="owner", cascade="all, delete-orphan"
    )

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


class Tag(Base):
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, index=True, nullable=False)

    templates = relationship("Template", secondary=template_tags, back_populates="tags")


class Template(Base):
    __tablename__ = "templates"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    title = Column(String, index=True, nullable=False)
    description = Column(Text, nullable=True)
    topic = Column(String, nullable=False)
    is_public = Column(Boolean, default=True, nullable=False)
    status = Column(String, default=TEMPLATE_STATUS_PENDING, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), onupdate=func.now(), server_default=func.now()
    )

    owner = relationship("User", back_populates="templates")
    # Question order is significant, position is the index in the form
    questions = relationship(
        "Question",
        back_populates="template",
        cascade="all, delete-orphan",
        order_by="Question.position",
    )
    tags = relationship("Tag", secondary=template_tags, back_populates="templates")
    responses = relationship(
        "Response", back_populates="template", cascade="all, delete-orphan"
    )
    likes = relationship("Like", back_populates="template", cascade="all, delete-orphan")
    comments = relationship(
        "Comment", back_populates="template", cascade="all, delete-orphan"
    )

    @property
    def is_active(self) -> bool:
        return self.status == TEMPLATE_STATUS_ACTIVE


class Question(Base):
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, index=True)
    template_id = Column(
        Integer, ForeignKey("templates.id", ondelete="CASCADE"), nullable=False
    )
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String, nullable=False)  # tag from question_types.QUESTION_TYPES
    required = Column(Boolean, default=False, nullable=False)
    options = Column(JSON, nullable=True)  # radio/select only
    min = Column("min_value", JSON, nullable=True)  # number or ISO date
    max = Column("max_value", JSON, nullable=True)
    position = Column(Integer, default=0, nullable=False)

    template = relationship("Template", back_populates="questions")


class Response(Base):
    __tablename__ = "responses"

    id = Column(Integer, primary_key=True, index=True)
    template_id = Column(
        Integer, ForeignKey("templates.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )  # NULL for anonymous submissions
    answers = Column(JSON, nullable=False)  # {"<question id>": value}
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    template = relationship("Template", back_populates="responses")


class Like(Base):
    __tablename__ = "likes"
    __table_args__ = (UniqueConstraint("template_id", "user_id", name="uq_like_template_user"),)

    id = Column(Integer, primary_key=True, index=True)
    template_id = Column(
        Integer, ForeignKey("templates.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    template = relationship("Template", back_populates="likes")


class Comment(Base):
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, index=True)
    template_id = Column(
        Integer, ForeignKey("templates.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    template = relationship("Template", back_populates="comments")
    author = relationship("User")
