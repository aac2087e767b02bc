"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- A controllable clock for OTP expiry
- In-memory directory and recording notification gateway
- A fully wired AccountLifecycle
- Test client over an app using in-memory storage
- PostgreSQL pool for integration tests (skipped when unreachable)
"""

from collections.abc import Generator
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from psycopg_pool import ConnectionPool, PoolTimeout

from src.adapters.repository.memory import InMemoryUserDirectory
from src.adapters.repository.postgres import run_migrations
from src.api.main import create_app
from src.config.settings import Settings
from src.domain.accounts import AccountLifecycle
from src.domain.exceptions import DeliveryFailure
from src.domain.otp import OTPGenerator
from src.domain.passwords import BcryptPasswordHasher
from src.domain.tokens import TokenIssuer

TEST_SECRET = "test-signing-secret-0123456789abcdef"

# bcrypt's minimum cost keeps the suite fast
FAST_ROUNDS = 4


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime.now(timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class RecordingGateway:
    """NotificationGateway that remembers every OTP it was asked to send."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []
        self.fail = False

    def send_otp(self, address: str, code: str, timeout: float) -> None:
        if self.fail:
            raise DeliveryFailure(address)
        self.sent.append((address, code))

    def last_code(self, address: str) -> str:
        return [code for to, code in self.sent if to == address][-1]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def directory() -> InMemoryUserDirectory:
    return InMemoryUserDirectory()


@pytest.fixture
def gateway() -> RecordingGateway:
    return RecordingGateway()


@pytest.fixture
def token_issuer() -> TokenIssuer:
    return TokenIssuer(secret=TEST_SECRET)


@pytest.fixture
def accounts(
    directory: InMemoryUserDirectory,
    gateway: RecordingGateway,
    token_issuer: TokenIssuer,
    clock: FakeClock,
) -> AccountLifecycle:
    return AccountLifecycle(
        directory=directory,
        notifier=gateway,
        hasher=BcryptPasswordHasher(rounds=FAST_ROUNDS),
        otp_generator=OTPGenerator(ttl=timedelta(minutes=10), clock=clock),
        token_issuer=token_issuer,
        clock=clock,
    )


@pytest.fixture
def memory_settings() -> Settings:
    return Settings(
        _env_file=None,
        storage_backend="memory",
        jwt_secret=TEST_SECRET,
        bcrypt_cost=FAST_ROUNDS,
        notification_backend="console",
    )


@pytest.fixture
def app_client(memory_settings: Settings) -> Generator[TestClient, None, None]:
    """Test client over a fully started app with in-memory storage."""
    with TestClient(create_app(memory_settings)) as client:
        yield client


@pytest.fixture(scope="session")
def pg_pool() -> Generator[ConnectionPool, None, None]:
    """
    Connection pool on DATABASE_URL with migrations applied.

    Skips the requesting test when PostgreSQL is not reachable.
    """
    settings = Settings()
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=1,
        max_size=10,
        open=False,
    )
    try:
        pool.open(wait=True, timeout=3.0)
    except PoolTimeout:
        pool.close()
        pytest.skip("PostgreSQL is not available")
    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture
def clean_tables(pg_pool: ConnectionPool) -> Generator[ConnectionPool, None, None]:
    """Empty the users and questions tables before each test."""
    with pg_pool.connection() as conn:
        conn.execute("TRUNCATE users, questions RESTART IDENTITY")
    yield pg_pool
