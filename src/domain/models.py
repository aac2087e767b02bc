"""
Domain records - Immutable value types shared by domain and adapters.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class AccountState(str, Enum):
    """
    Account lifecycle states.

    Transitions (forward-only):
    - UNREGISTERED -> PENDING (register)
    - PENDING -> PENDING (register retry, resend OTP)
    - PENDING -> VERIFIED (verify OTP)

    VERIFIED is terminal. UNREGISTERED is never stored; it is the
    absence of a record.
    """

    UNREGISTERED = "UNREGISTERED"
    PENDING = "PENDING"
    VERIFIED = "VERIFIED"


@dataclass(frozen=True)
class UserRecord:
    """
    Stored identity for one email address.

    While pending, otp_code and otp_expires_at are both set; once
    verified, both are None.
    """

    email: str
    password_hash: str
    otp_code: str | None
    otp_expires_at: datetime | None
    is_verified: bool
    created_at: datetime
    updated_at: datetime

    @property
    def state(self) -> AccountState:
        return AccountState.VERIFIED if self.is_verified else AccountState.PENDING


@dataclass(frozen=True)
class OTPIssued:
    """Result of register and resend: where the OTP went and when it lapses."""

    email: str
    expires_at: datetime


@dataclass(frozen=True)
class Answer:
    text: str
    score: int | float


@dataclass(frozen=True)
class Question:
    id: str
    question_text: str
    answers: list[Answer] = field(default_factory=list)
