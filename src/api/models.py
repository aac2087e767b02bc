"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
"""

from datetime import datetime

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.domain.models import Answer, Question
from src.domain.passwords import MAX_PASSWORD_BYTES


class EmailRequest(BaseModel):
    """Request body identifying an account by email."""

    email: str = Field(..., description="Email address, case-sensitive as entered")

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        """
        Validate email syntax but keep the address as received, minus whitespace.

        Only a bare addr-spec is accepted; display-name forms such as
        "Name <addr>" are rejected so one mailbox maps to one identity.
        """
        value = value.strip()
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError as e:
            raise ValueError(str(e)) from e
        return value


class ResendOTPRequest(EmailRequest):
    """Request model for OTP resend."""


class CredentialsRequest(EmailRequest):
    password: str = Field(..., min_length=1, description="Account password")

    @field_validator("password")
    @classmethod
    def check_password_length(cls, value: str) -> str:
        if len(value.encode()) > MAX_PASSWORD_BYTES:
            raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


class RegisterRequest(CredentialsRequest):
    """Request model for user registration."""


class LoginRequest(CredentialsRequest):
    """Request model for credential login."""


class RegisterResponse(BaseModel):
    """Response model for registration and OTP resend."""

    message: str
    email: str
    expires_at: datetime


class VerifyOTPRequest(EmailRequest):
    """Request model for OTP verification."""

    otp: str = Field(..., pattern=r"^\s*\d+\s*$", description="Numeric one-time passcode")


class VerifyOTPResponse(BaseModel):
    message: str
    email: str


class LoginResponse(BaseModel):
    token: str


class AnswerModel(BaseModel):
    text: str = Field(..., min_length=1)
    score: int | float


class QuestionCreate(BaseModel):
    """Request model for a new quiz question (camelCase on the wire)."""

    model_config = ConfigDict(populate_by_name=True)

    question_text: str = Field(..., alias="questionText", min_length=1)
    answers: list[AnswerModel] = Field(..., min_length=1)

    def to_answers(self) -> list[Answer]:
        return [Answer(text=a.text, score=a.score) for a in self.answers]


class QuestionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    question_text: str = Field(..., serialization_alias="questionText")
    answers: list[AnswerModel]

    @classmethod
    def from_domain(cls, question: Question) -> "QuestionResponse":
        return cls(
            id=question.id,
            question_text=question.question_text,
            answers=[AnswerModel(text=a.text, score=a.score) for a in question.answers],
        )


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
