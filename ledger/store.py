"""
Document store adapter over Flask-SQLAlchemy.

Gives the ledger the five primitives it relies on: per-document reads and
writes, filtered queries, atomic increment-by-delta updates, multi-document
transactions with optimistic-conflict retry, and server-assigned timestamps
(the models' ``server_default=db.func.now()`` columns).

A transaction is a unit of work: a callable that takes a :class:`Transaction`
handle and returns a result. :meth:`DocumentStore.run_transaction` commits it,
or rolls it back and re-runs it from scratch when a guarded write finds that
a concurrent transaction changed the document first.
"""
import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, List, Optional

from flask import current_app
from sqlalchemy import inspect, select, update
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from extensions import db
from ledger.errors import StoreUnavailableError, TransactionConflict


logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5

SERVER_TIMESTAMP = db.func.now()

_RETRYABLE_MARKERS = ("could not serialize", "deadlock detected", "database is locked")


def snapshot(instance) -> Optional[Dict[str, Any]]:
    """Plain dict copy of a row's columns, safe to hold across commits"""
    if instance is None:
        return None
    mapper = inspect(instance).mapper
    return {attr.key: getattr(instance, attr.key) for attr in mapper.column_attrs}


def _primary_key(model):
    return inspect(model).primary_key[0]


def _is_retryable(error: OperationalError) -> bool:
    message = str(getattr(error, "orig", error)).lower()
    return any(marker in message for marker in _RETRYABLE_MARKERS)


class Transaction:
    """Handle passed to a unit of work. Valid only for one attempt."""

    def __init__(self, session):
        self.session = session
        self._versions = {}

    def get(self, model, key, version_field: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """
        Read one document as a snapshot.
        With ``version_field`` the value seen is remembered, and later
        increments of the same document only apply if it is unchanged.
        """
        instance = self.session.get(model, key, populate_existing=True)
        doc = snapshot(instance)
        if doc is not None and version_field:
            self._versions[(model, key)] = (version_field, doc[version_field])
        return doc

    def query(self, model, **filters) -> List[Dict[str, Any]]:
        rows = self.session.execute(select(model).filter_by(**filters)).scalars().all()
        return [snapshot(row) for row in rows]

    def create(self, instance):
        self.session.add(instance)
        self.session.flush()
        return instance

    def update(self, model, key, **values) -> int:
        """Plain field overwrite for fields no other transaction derives values from"""
        result = self.session.execute(
            update(model)
            .where(_primary_key(model) == key)
            .values(values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def increment(self, model, key, field: str, delta: int) -> int:
        """
        UPDATE ... SET field = field + delta, never a read-then-overwrite.
        A negative delta never takes the field below zero.
        Returns the number of documents changed (0 if ``key`` does not exist
        or the field holds less than ``-delta``).
        Raises TransactionConflict when the guarded version moved.
        """
        column = getattr(model, field)
        stmt = update(model).where(_primary_key(model) == key)
        if delta < 0:
            stmt = stmt.where(column >= -delta)
        values = {field: column + delta}

        guard = self._versions.get((model, key))
        if guard:
            version_field, seen = guard
            version_column = getattr(model, version_field)
            stmt = stmt.where(version_column == seen)
            values[version_field] = version_column + 1

        result = self.session.execute(
            stmt.values(values).execution_options(synchronize_session=False)
        )

        if result.rowcount == 0 and guard:
            raise TransactionConflict(
                f"{model.__tablename__}/{key} changed since it was read (version {guard[1]})"
            )
        if guard:
            self._versions[(model, key)] = (guard[0], guard[1] + 1)
        return result.rowcount


class DocumentStore:
    """Narrow store interface the ledger services are written against"""

    def __init__(self, session=None, max_attempts: Optional[int] = None):
        self._session = session
        self._max_attempts = max_attempts

    @property
    def session(self):
        return self._session if self._session is not None else db.session

    @property
    def max_attempts(self) -> int:
        if self._max_attempts is not None:
            return self._max_attempts
        return current_app.config.get("TRANSACTION_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS)

    @contextmanager
    def _guard(self, action: str):
        try:
            yield
        except IntegrityError:
            self.session.rollback()
            raise
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Store failure during {action}: {e}")
            raise StoreUnavailableError() from e

    # ------------------------------------------------------------------
    # single-document operations
    # ------------------------------------------------------------------
    def get(self, model, key):
        with self._guard(f"get {model.__tablename__}/{key}"):
            return self.session.get(model, key)

    def query(self, model, order_by=None, **filters) -> list:
        with self._guard(f"query {model.__tablename__}"):
            stmt = select(model).filter_by(**filters)
            if order_by is not None:
                stmt = stmt.order_by(order_by)
            return self.session.execute(stmt).scalars().all()

    def create(self, instance):
        """Insert one document and commit. IntegrityError propagates for the caller to classify."""
        with self._guard(f"create {instance.__tablename__}"):
            self.session.add(instance)
            self.session.commit()
            return instance

    def increment(self, model, key, field: str, delta: int) -> int:
        with self._guard(f"increment {model.__tablename__}/{key}.{field}"):
            changed = Transaction(self.session).increment(model, key, field, delta)
            self.session.commit()
            return changed

    # ------------------------------------------------------------------
    # transactions
    # ------------------------------------------------------------------
    def run_transaction(self, unit_of_work: Callable[[Transaction], Any], max_attempts: Optional[int] = None):
        """
        Run ``unit_of_work(tx)`` and commit, retrying the whole unit on a
        write conflict. Exceptions raised by the unit itself roll back and
        propagate unchanged; nothing it wrote is kept.
        """
        attempts = max_attempts or self.max_attempts
        session = self.session
        name = getattr(unit_of_work, "__name__", "transaction")

        for attempt in range(1, attempts + 1):
            tx = Transaction(session)
            try:
                result = unit_of_work(tx)
                session.commit()
                if attempt > 1:
                    logger.info(f"{name} committed on attempt {attempt}")
                return result
            except (TransactionConflict, StaleDataError) as e:
                session.rollback()
                logger.warning(f"{name} conflict on attempt {attempt}/{attempts}: {e}")
            except OperationalError as e:
                session.rollback()
                if not _is_retryable(e):
                    logger.error(f"{name} failed: {e}")
                    raise StoreUnavailableError() from e
                logger.warning(f"{name} serialization failure on attempt {attempt}/{attempts}: {e}")
            except IntegrityError:
                session.rollback()
                raise
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f"{name} failed: {e}")
                raise StoreUnavailableError() from e
            except Exception:
                session.rollback()
                raise

        logger.error(f"{name} aborted after {attempts} conflicting attempts")
        raise StoreUnavailableError(f"Transaction aborted after {attempts} conflicting attempts")
