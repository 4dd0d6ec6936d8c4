"""
Per-file transaction controller.

    CONNECTED -> IN_TRANSACTION -> COMMITTED   -> RELEASED
                                -> ROLLED_BACK -> RELEASED

One FileTransaction wraps one source file. Row rejections are handled inside
the `with` block and never reach it. Any exception that leaves the block, or a
failing commit, rolls the whole file back, is written to the migration error
log and is re-raised unchanged. The session is closed exactly once.
"""

from __future__ import annotations

from enum import Enum
from types import TracebackType
from typing import Callable

from sqlalchemy.orm import Session

from rentroll_kernel.logging_config import get_logger

from rentroll_ingestion.services.error_log import MigrationErrorLog

logger = get_logger("ingestion.transaction")


class TransactionState(str, Enum):
    CONNECTED = "connected"
    IN_TRANSACTION = "in_transaction"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"
    RELEASED = "released"


class FileTransaction:
    """Context manager yielding a Session whose work commits or rolls back as a unit."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        source: str,
        error_log: MigrationErrorLog | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._source = source
        self._error_log = error_log
        self._session: Session | None = None
        self.history: list[TransactionState] = []

    @property
    def state(self) -> TransactionState | None:
        return self.history[-1] if self.history else None

    def _transition(self, state: TransactionState) -> None:
        self.history.append(state)
        logger.debug("transaction_state", extra={"state": state.value})

    def __enter__(self) -> Session:
        self._session = self._session_factory()
        self._transition(TransactionState.CONNECTED)
        try:
            self._session.begin()
        except Exception:
            self._release()
            raise
        self._transition(TransactionState.IN_TRANSACTION)
        return self._session

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        try:
            if exc is None:
                try:
                    self._session.commit()
                except Exception as commit_exc:
                    self._rollback(commit_exc)
                    raise
                self._transition(TransactionState.COMMITTED)
                logger.info("transaction_committed")
            else:
                self._rollback(exc)
        finally:
            self._release()
        return False

    def _rollback(self, exc: BaseException) -> None:
        self._session.rollback()
        self._transition(TransactionState.ROLLED_BACK)
        logger.warning(
            "transaction_rolled_back",
            exc_info=(type(exc), exc, exc.__traceback__),
        )
        if self._error_log is not None:
            self._error_log.record_failure(self._source, str(exc) or type(exc).__name__)

    def _release(self) -> None:
        if self._session is None or self.state is TransactionState.RELEASED:
            return
        self._session.close()
        self._transition(TransactionState.RELEASED)
