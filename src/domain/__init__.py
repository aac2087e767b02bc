"""
Domain layer - Account lifecycle business logic.

This package contains the account verification and authentication
logic. It defines its own port interfaces for infrastructure
abstraction; adapters live in src.adapters.
"""

from .accounts import AccountLifecycle
from .exceptions import (
    AccountError,
    AccountNotFound,
    AlreadyRegistered,
    AlreadyVerified,
    ConflictError,
    CredentialError,
    DeliveryFailure,
    EmailAlreadyExists,
    InternalError,
    InvalidCredentials,
    InvalidOTP,
    InvalidToken,
    NotFoundError,
    NotVerified,
    OTPExpired,
    StorageUnavailable,
    Unauthenticated,
)
from .guard import AuthGuard
from .models import AccountState, Answer, OTPIssued, Question, UserRecord
from .otp import OTPGenerator
from .passwords import BcryptPasswordHasher
from .ports import NotificationGateway, QuestionStore, UserDirectory
from .tokens import TokenIssuer

__all__ = [
    "AccountError",
    "AccountLifecycle",
    "AccountNotFound",
    "AccountState",
    "AlreadyRegistered",
    "AlreadyVerified",
    "Answer",
    "AuthGuard",
    "BcryptPasswordHasher",
    "ConflictError",
    "CredentialError",
    "DeliveryFailure",
    "EmailAlreadyExists",
    "InternalError",
    "InvalidCredentials",
    "InvalidOTP",
    "InvalidToken",
    "NotFoundError",
    "NotVerified",
    "NotificationGateway",
    "OTPExpired",
    "OTPGenerator",
    "OTPIssued",
    "Question",
    "QuestionStore",
    "StorageUnavailable",
    "TokenIssuer",
    "Unauthenticated",
    "UserDirectory",
    "UserRecord",
]
