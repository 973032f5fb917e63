import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class JobPhase(str, Enum):
    created = "created"
    fetched = "fetched"
    separated = "separated"
    collected = "collected"
    uploaded = "uploaded"
    cleaned = "cleaned"


_PHASE_ORDER = list(JobPhase)


class PipelineState(str, Enum):
    idle = "idle"
    fetching = "fetching"
    separating = "separating"
    collecting = "collecting"
    uploading = "uploading"
    done = "done"
    cleanup = "cleanup"


class Job(BaseModel):
    id: str
    phase: JobPhase = JobPhase.created
    created_at: str = Field(
        default_factory=lambda: time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        frozen=True,
        description="Timestamp when the job was started",
    )
    error: str | None = None

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str):
        # The id names both a directory and a file inside the workspace.
        if not v or not v.strip():
            raise ValueError("Job id must not be empty")
        if "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError(f"Job id must be a single path component: {v!r}")
        return v

    def advance(self, phase: JobPhase) -> None:
        if self.phase is JobPhase.cleaned:
            raise ValueError(f"Job {self.id} is already cleaned")
        if phase is not JobPhase.cleaned:
            expected = _PHASE_ORDER[_PHASE_ORDER.index(self.phase) + 1]
            if phase is not expected:
                raise ValueError(f"Job {self.id} cannot go from {self.phase.value} to {phase.value}")
        self.phase = phase


@dataclass(frozen=True)
class StagedAsset:
    job_id: str
    path: Path
    size: int


@dataclass(frozen=True)
class Stem:
    name: str
    path: Path
