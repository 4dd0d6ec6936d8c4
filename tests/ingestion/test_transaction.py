"""Tests for the per-file transaction controller."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from rentroll_ingestion.services.transaction import FileTransaction, TransactionState
from rentroll_kernel.exceptions import MissingFieldError
from rentroll_kernel.models import Facility

S = TransactionState


def _facility_count(session_factory) -> int:
    with session_factory() as session:
        return session.scalar(select(func.count()).select_from(Facility))


class TestFileTransaction:

    def test_commit_path(self, session_factory):
        tx = FileTransaction(session_factory, "unit.csv")
        with tx as session:
            session.add(Facility(name="North"))
        assert tx.history == [S.CONNECTED, S.IN_TRANSACTION, S.COMMITTED, S.RELEASED]
        assert _facility_count(session_factory) == 1

    def test_exception_rolls_back_and_reraises(self, session_factory, error_log):
        tx = FileTransaction(session_factory, "unit.csv", error_log)
        with pytest.raises(RuntimeError, match="connection lost"):
            with tx as session:
                session.add(Facility(name="North"))
                session.flush()
                raise RuntimeError("connection lost")
        assert tx.history == [S.CONNECTED, S.IN_TRANSACTION, S.ROLLED_BACK, S.RELEASED]
        assert _facility_count(session_factory) == 0
        assert "unit.csv migration error: connection lost" in error_log.path.read_text()

    def test_handled_row_rejection_does_not_change_state(self, session_factory):
        tx = FileTransaction(session_factory, "rentRoll.csv")
        with tx as session:
            try:
                raise MissingFieldError(("lastName",))
            except MissingFieldError:
                pass
            assert tx.state is S.IN_TRANSACTION
            session.add(Facility(name="North"))
        assert tx.state is S.RELEASED
        assert S.COMMITTED in tx.history

    def test_failing_commit_rolls_back(self, session_factory, error_log):
        tx = FileTransaction(session_factory, "unit.csv", error_log)
        with pytest.raises(IntegrityError):
            with tx as session:
                session.add(Facility(name="North"))
                session.flush()
                # Duplicate name only surfaces at commit's flush
                session.add(Facility(name="North"))
        assert tx.history == [S.CONNECTED, S.IN_TRANSACTION, S.ROLLED_BACK, S.RELEASED]
        assert _facility_count(session_factory) == 0
        assert "migration error" in error_log.path.read_text()

    def test_release_happens_once(self, session_factory):
        tx = FileTransaction(session_factory, "unit.csv")
        with tx:
            pass
        tx._release()
        assert tx.history.count(S.RELEASED) == 1

    def test_rollback_logged(self, session_factory, captured_logs):
        with pytest.raises(ValueError):
            with FileTransaction(session_factory, "unit.csv"):
                raise ValueError("bad")
        logs = captured_logs()
        rolled_back = [r for r in logs if r["message"] == "transaction_rolled_back"]
        assert len(rolled_back) == 1
        assert rolled_back[0]["level"] == "WARNING"
        assert rolled_back[0]["exc_type"] == "ValueError"
