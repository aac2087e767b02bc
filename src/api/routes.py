"""
API routes - Account lifecycle and quiz question endpoints.

This module defines the HTTP endpoints:
- POST /register    - Begin registration, send OTP
- POST /verify-otp  - Confirm account with OTP
- POST /resend-otp  - Replace outstanding OTP
- POST /login       - Exchange credentials for a bearer token
- POST /questions   - Add a quiz question (bearer token required)
- GET  /questions   - List quiz questions

Endpoints are plain functions so FastAPI runs them in its threadpool;
bcrypt hashing in one request does not block the others. Domain
exceptions propagate to the handler registered in src.api.main.
"""

from fastapi import APIRouter, Depends, status

from src.api.dependencies import (
    get_account_lifecycle,
    get_current_subject,
    get_question_store,
)
from src.api.models import (
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    QuestionCreate,
    QuestionResponse,
    RegisterRequest,
    RegisterResponse,
    ResendOTPRequest,
    VerifyOTPRequest,
    VerifyOTPResponse,
)
from src.domain.accounts import AccountLifecycle
from src.domain.ports import QuestionStore

accounts_router = APIRouter(tags=["accounts"])
questions_router = APIRouter(tags=["questions"])

_CLIENT_ERROR = {400: {"model": ErrorResponse, "description": "Invalid request or account state"}}


@accounts_router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        **_CLIENT_ERROR,
        500: {"model": ErrorResponse, "description": "OTP delivery or storage failure"},
    },
    summary="Register a new user",
    description="Submit email and password to begin registration. "
    "A numeric one-time passcode is sent to the provided email. "
    "Registering again before verification replaces the password and OTP.",
)
def register(
    request_data: RegisterRequest,
    service: AccountLifecycle = Depends(get_account_lifecycle),
) -> RegisterResponse:
    issued = service.register(request_data.email, request_data.password)
    return RegisterResponse(
        message="OTP sent to email",
        email=issued.email,
        expires_at=issued.expires_at,
    )


@accounts_router.post(
    "/verify-otp",
    response_model=VerifyOTPResponse,
    responses=_CLIENT_ERROR,
    summary="Verify account with OTP",
)
def verify_otp(
    request_data: VerifyOTPRequest,
    service: AccountLifecycle = Depends(get_account_lifecycle),
) -> VerifyOTPResponse:
    """
    Verify a pending account.

    - **email**: Address used at registration
    - **otp**: Code received by email
    """
    record = service.verify_otp(request_data.email, request_data.otp)
    return VerifyOTPResponse(message="Account verified", email=record.email)


@accounts_router.post(
    "/resend-otp",
    response_model=RegisterResponse,
    responses={
        **_CLIENT_ERROR,
        500: {"model": ErrorResponse, "description": "OTP delivery or storage failure"},
    },
    summary="Send a new OTP",
)
def resend_otp(
    request_data: ResendOTPRequest,
    service: AccountLifecycle = Depends(get_account_lifecycle),
) -> RegisterResponse:
    issued = service.resend_otp(request_data.email)
    return RegisterResponse(
        message="OTP resent to email",
        email=issued.email,
        expires_at=issued.expires_at,
    )


@accounts_router.post(
    "/login",
    response_model=LoginResponse,
    responses=_CLIENT_ERROR,
    summary="Log in with email and password",
    description="Returns a bearer token valid for 7 days. Send it as the raw "
    "value of the Authorization header on protected endpoints.",
)
def login(
    request_data: LoginRequest,
    service: AccountLifecycle = Depends(get_account_lifecycle),
) -> LoginResponse:
    token = service.login(request_data.email, request_data.password)
    return LoginResponse(token=token)


@questions_router.post(
    "/questions",
    response_model=QuestionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Malformed question payload"},
        401: {"model": ErrorResponse, "description": "Missing or invalid token"},
    },
    summary="Add a quiz question",
)
def create_question(
    request_data: QuestionCreate,
    subject: str = Depends(get_current_subject),
    store: QuestionStore = Depends(get_question_store),
) -> QuestionResponse:
    question = store.add(request_data.question_text, request_data.to_answers())
    return QuestionResponse.from_domain(question)


@questions_router.get(
    "/questions",
    response_model=list[QuestionResponse],
    summary="List quiz questions",
)
def list_questions(
    store: QuestionStore = Depends(get_question_store),
) -> list[QuestionResponse]:
    return [QuestionResponse.from_domain(q) for q in store.list_all()]
