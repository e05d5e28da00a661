"""cph: list, run and approve AWS CodePipeline pipelines from the terminal."""

from __future__ import annotations

from cph.client import PipelineClient
from cph.exceptions import (
    ConfigError,
    CphError,
    InvalidRangeError,
    OutOfRangeError,
    RemoteCallError,
    SelectionError,
    SessionError,
    UnrecognizedInputError,
)
from cph.models import ApprovalDecision, Selection, SelectionKind, StageInfo
from cph.selection import parse_selection

__version__ = "1.0.0"

__all__ = [
    "ApprovalDecision",
    "ConfigError",
    "CphError",
    "InvalidRangeError",
    "OutOfRangeError",
    "PipelineClient",
    "RemoteCallError",
    "Selection",
    "SelectionError",
    "SelectionKind",
    "SessionError",
    "StageInfo",
    "UnrecognizedInputError",
    "__version__",
    "parse_selection",
]
