"""
In-memory repository adapters - Implement UserDirectory and QuestionStore.

Process-local storage for development and tests. A single lock guards
each store, so every check-and-write below is atomic.
"""

import threading
import uuid
from dataclasses import replace
from datetime import datetime

from src.domain.exceptions import AccountNotFound, AlreadyVerified, EmailAlreadyExists
from src.domain.models import Answer, Question, UserRecord
from src.domain.otp import utcnow


class InMemoryUserDirectory:
    """
    Implements UserDirectory protocol with a dict keyed by email.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: dict[str, UserRecord] = {}

    def find_by_email(self, email: str) -> UserRecord | None:
        with self._lock:
            return self._records.get(email)

    def create_pending(
        self, email: str, password_hash: str, otp_code: str, otp_expires_at: datetime
    ) -> UserRecord:
        now = utcnow()
        record = UserRecord(
            email=email,
            password_hash=password_hash,
            otp_code=otp_code,
            otp_expires_at=otp_expires_at,
            is_verified=False,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            if email in self._records:
                raise EmailAlreadyExists(email)
            self._records[email] = record
        return record

    def update_pending_credentials(
        self, email: str, password_hash: str, otp_code: str, otp_expires_at: datetime
    ) -> UserRecord:
        return self._update_pending(
            email,
            password_hash=password_hash,
            otp_code=otp_code,
            otp_expires_at=otp_expires_at,
        )

    def update_otp(self, email: str, otp_code: str, otp_expires_at: datetime) -> UserRecord:
        return self._update_pending(email, otp_code=otp_code, otp_expires_at=otp_expires_at)

    def mark_verified(self, email: str) -> UserRecord:
        return self._update_pending(email, is_verified=True, otp_code=None, otp_expires_at=None)

    def _update_pending(self, email: str, **changes: object) -> UserRecord:
        with self._lock:
            record = self._records.get(email)
            if record is None:
                raise AccountNotFound(email)
            if record.is_verified:
                raise AlreadyVerified(email)
            updated = replace(record, updated_at=utcnow(), **changes)
            self._records[email] = updated
            return updated

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


class InMemoryQuestionStore:
    """Implements QuestionStore protocol with an append-only list."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._questions: list[Question] = []

    def add(self, question_text: str, answers: list[Answer]) -> Question:
        question = Question(id=uuid.uuid4().hex, question_text=question_text, answers=list(answers))
        with self._lock:
            self._questions.append(question)
        return question

    def list_all(self) -> list[Question]:
        with self._lock:
            return list(self._questions)
