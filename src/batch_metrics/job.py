"""Job execution state handed to listeners by the batch driver."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional

from .context import ExecutionContext


class JobStatus(str, enum.Enum):
    STARTING = "STARTING"
    STARTED = "STARTED"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


@dataclass(slots=True)
class JobExecution:
    """One execution attempt of a job instance."""

    job_name: str
    instance_key: str
    execution_id: str
    execution_context: ExecutionContext = field(default_factory=ExecutionContext)
    status: JobStatus = JobStatus.STARTING
    failure: Optional[BaseException] = None

    @property
    def run_identifier(self) -> str:
        return f"{self.job_name}.{self.execution_id}"


__all__ = ["JobExecution", "JobStatus"]
