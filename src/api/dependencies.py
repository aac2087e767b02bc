"""
FastAPI dependencies - Dependency injection factories.

This module builds the domain services from settings and provides
Depends() factories for injecting them into routes. Services are
built once at startup and kept in app.state, so the per-email lock
registry of AccountLifecycle is shared by all requests.
"""

from datetime import timedelta

from fastapi import Depends, Request
from fastapi.security import APIKeyHeader

from src.adapters.smtp.console import ConsoleNotificationGateway
from src.adapters.smtp.mailer import SmtpNotificationGateway
from src.config.settings import Settings
from src.domain.accounts import AccountLifecycle
from src.domain.guard import AuthGuard
from src.domain.otp import OTPGenerator
from src.domain.passwords import BcryptPasswordHasher
from src.domain.ports import NotificationGateway, QuestionStore, UserDirectory
from src.domain.tokens import TokenIssuer


def build_notification_gateway(settings: Settings) -> NotificationGateway:
    """Select the OTP delivery channel configured by NOTIFICATION_BACKEND."""
    if settings.notification_backend == "smtp":
        return SmtpNotificationGateway(
            host=settings.smtp_host,
            port=settings.smtp_port,
            sender=settings.smtp_sender,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
        )
    return ConsoleNotificationGateway()


def build_token_issuer(settings: Settings) -> TokenIssuer:
    return TokenIssuer(
        secret=settings.jwt_secret,
        ttl=timedelta(days=settings.token_ttl_days),
        algorithm=settings.jwt_algorithm,
    )


def build_account_lifecycle(
    settings: Settings,
    directory: UserDirectory,
    notifier: NotificationGateway | None = None,
) -> AccountLifecycle:
    """
    Create the account lifecycle service with injected dependencies.

    Wires together the directory, notification gateway, hasher,
    OTP generator and token issuer.
    """
    return AccountLifecycle(
        directory=directory,
        notifier=notifier or build_notification_gateway(settings),
        hasher=BcryptPasswordHasher(rounds=settings.bcrypt_cost),
        otp_generator=OTPGenerator(
            ttl=timedelta(seconds=settings.otp_ttl_seconds),
            length=settings.otp_length,
        ),
        token_issuer=build_token_issuer(settings),
        notification_timeout=settings.notification_timeout_seconds,
    )


def get_account_lifecycle(request: Request) -> AccountLifecycle:
    """Get the account lifecycle service from app state."""
    return request.app.state.accounts


def get_question_store(request: Request) -> QuestionStore:
    """Get the question store from app state."""
    return request.app.state.question_store


def get_auth_guard(request: Request) -> AuthGuard:
    """Get the auth guard from app state."""
    return request.app.state.auth_guard


# Raw token in the Authorization header, no scheme prefix
token_header = APIKeyHeader(name="Authorization", auto_error=False)


def get_current_subject(
    request: Request,
    credential: str | None = Depends(token_header),
    guard: AuthGuard = Depends(get_auth_guard),
) -> str:
    """
    Resolve the caller of a protected route.

    Raises Unauthenticated (401) for a missing or rejected token. The
    subject is also attached to request.state for downstream use.
    """
    subject = guard.authenticate(credential)
    request.state.subject = subject
    return subject
