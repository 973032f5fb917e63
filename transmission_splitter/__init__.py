"""Split a transmission's source audio into channels with demucs and store them in S3."""

from .errors import (
    SplitterError,
    NotFoundError,
    InvalidBodyError,
    LaunchError,
    ToolExecutionError,
    SeparatorTimeoutError,
    NoOutputError,
    TransferError,
)
from .pipeline import PipelineOrchestrator, RunResult

__all__ = [
    "SplitterError",
    "NotFoundError",
    "InvalidBodyError",
    "LaunchError",
    "ToolExecutionError",
    "SeparatorTimeoutError",
    "NoOutputError",
    "TransferError",
    "PipelineOrchestrator",
    "RunResult",
]
