"""
Shared fixtures for adversarial tests.

Provides lifecycles over both storage backends so concurrency attacks
run against the in-process lock and the conditional SQL writes.
"""

from collections.abc import Callable
from datetime import timedelta

import pytest
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import PostgresUserDirectory
from src.domain.accounts import AccountLifecycle
from src.domain.otp import OTPGenerator
from src.domain.passwords import BcryptPasswordHasher
from src.domain.tokens import TokenIssuer

# Module-level marker for all adversarial tests
pytestmark = pytest.mark.adversarial

FAST_ROUNDS = 4


@pytest.fixture
def pg_directory(clean_tables: ConnectionPool) -> PostgresUserDirectory:
    return PostgresUserDirectory(clean_tables, timeout=5.0)


@pytest.fixture
def build_lifecycle(
    pg_directory: PostgresUserDirectory, gateway, token_issuer: TokenIssuer
) -> Callable[[], AccountLifecycle]:
    """Build lifecycles with their own lock registry, as separate processes would have."""

    def build() -> AccountLifecycle:
        return AccountLifecycle(
            directory=pg_directory,
            notifier=gateway,
            hasher=BcryptPasswordHasher(rounds=FAST_ROUNDS),
            otp_generator=OTPGenerator(ttl=timedelta(minutes=10)),
            token_issuer=token_issuer,
        )

    return build
