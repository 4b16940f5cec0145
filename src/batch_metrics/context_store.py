"""Durable storage for job instance execution contexts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List

from sqlalchemy import delete, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from tenacity import RetryError, retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from .context import ExecutionContext
from .database import create_session_factory, session_scope
from .logging_setup import get_logger
from .models import Base, ExecutionContextEntry
from .registry import GaugeSummary

logger = get_logger(__name__)

COUNTER_TYPE = "counter"
GAUGE_TYPE = "gauge"
VALUE_TYPE = "value"


class ContextStoreError(RuntimeError):
    """Raised when an execution context cannot be persisted."""


@dataclass(slots=True)
class StoreConfig:
    retry_attempts: int = 3
    backoff_seconds: float = 1
    backoff_max_seconds: float = 8


def _encode(value: Any) -> tuple[str, Any]:
    if isinstance(value, GaugeSummary):
        return GAUGE_TYPE, value.as_dict()
    if isinstance(value, int) and not isinstance(value, bool):
        return COUNTER_TYPE, value
    return VALUE_TYPE, value


def _decode(value_type: str, value: Any) -> Any:
    if value_type == GAUGE_TYPE:
        return GaugeSummary.from_dict(value)
    if value_type == COUNTER_TYPE:
        return int(value)
    return value


class ExecutionContextStore:
    """Persist each job instance's execution context as one row per key."""

    def __init__(self, engine: Engine, config: StoreConfig | None = None) -> None:
        self.engine = engine
        self.config = config or StoreConfig()
        self._session_factory = create_session_factory(engine)
        Base.metadata.create_all(engine)

    def load(self, instance_key: str) -> ExecutionContext:
        with self._session_factory() as session:
            rows = session.execute(
                select(ExecutionContextEntry).where(
                    ExecutionContextEntry.job_instance_key == instance_key
                )
            ).scalars()
            values = {row.entry_key: _decode(row.value_type, row.value) for row in rows}
        return ExecutionContext(values)

    def save(self, instance_key: str, context: ExecutionContext) -> None:
        """Replace the stored context of ``instance_key`` in a single transaction."""

        logger.info("context_store.save", instance_key=instance_key, entries=len(context))
        snapshot = context.to_dict()

        @retry(
            stop=stop_after_attempt(self.config.retry_attempts),
            wait=wait_exponential(
                multiplier=self.config.backoff_seconds,
                min=self.config.backoff_seconds,
                max=self.config.backoff_max_seconds,
            ),
            retry=retry_if_exception_type(OperationalError),
        )
        def _execute() -> None:
            with session_scope(self._session_factory) as session:
                session.execute(
                    delete(ExecutionContextEntry).where(
                        ExecutionContextEntry.job_instance_key == instance_key
                    )
                )
                for key, value in snapshot.items():
                    value_type, encoded = _encode(value)
                    session.add(
                        ExecutionContextEntry(
                            job_instance_key=instance_key,
                            entry_key=key,
                            value_type=value_type,
                            value=encoded,
                        )
                    )

        try:
            _execute()
        except RetryError as exc:
            raise ContextStoreError(
                f"Failed to persist execution context for job instance '{instance_key}'"
            ) from exc
        context.dirty = False

    def clear(self, instance_key: str) -> int:
        with session_scope(self._session_factory) as session:
            result = session.execute(
                delete(ExecutionContextEntry).where(
                    ExecutionContextEntry.job_instance_key == instance_key
                )
            )
            deleted = result.rowcount or 0
        logger.info("context_store.clear", instance_key=instance_key, deleted=deleted)
        return deleted

    def instance_keys(self) -> List[str]:
        with self._session_factory() as session:
            rows = session.execute(
                select(ExecutionContextEntry.job_instance_key)
                .distinct()
                .order_by(ExecutionContextEntry.job_instance_key)
            ).scalars()
            return list(rows)


__all__ = ["ContextStoreError", "ExecutionContextStore", "StoreConfig"]
