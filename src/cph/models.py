"""Data models for cph.

This module defines the core data structures shared by the client, the
selection parser and the command orchestrators:

- ActionStatus: Enum for the status of a pipeline action or execution
- ApprovalDecision: Enum for the outcome submitted to a manual approval
- SelectionKind: Enum for the form of a parsed user selection
- StageInfo: Frozen snapshot of the active (or most recent) stage
- ExecutionSummary: Frozen summary of the latest pipeline execution
- Selection: Frozen result of parsing a user response
- Execution: Frozen result of starting a pipeline
- ApprovalResult: Frozen result of submitting an approval decision
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from datetime import datetime


class ActionStatus(str, Enum):
    """Status reported by CodePipeline for an action or an execution.

    Attributes:
        IN_PROGRESS: Running, or waiting on a manual approval.
        FAILED: Finished with an error.
        SUCCEEDED: Finished successfully.
        STOPPED: Stopped by a user.
        STOPPING: Stop requested, not yet finished.
        SUPERSEDED: Replaced by a newer execution.
        CANCELLED: Cancelled before completion.
        ABANDONED: Abandoned after a stop.
    """

    IN_PROGRESS = "InProgress"
    FAILED = "Failed"
    SUCCEEDED = "Succeeded"
    STOPPED = "Stopped"
    STOPPING = "Stopping"
    SUPERSEDED = "Superseded"
    CANCELLED = "Cancelled"
    ABANDONED = "Abandoned"

    @property
    def is_current(self) -> bool:
        """Return True when a stage with this status is where the pipeline sits now."""
        return self in (ActionStatus.IN_PROGRESS, ActionStatus.FAILED)


class ApprovalDecision(str, Enum):
    """Decision submitted to a manual approval action."""

    APPROVED = "Approved"
    REJECTED = "Rejected"


class SelectionKind(str, Enum):
    """Form of a parsed user selection.

    Attributes:
        ALL: ``yes``, every listed pipeline.
        CANCEL: ``no``, nothing is done.
        REJECT: ``reject``, every listed pipeline with a rejection.
        SINGLE: A single index.
        RANGE: A contiguous ``A-B`` range.
        LIST: An explicit comma-separated list.
    """

    ALL = "all"
    CANCEL = "cancel"
    REJECT = "reject"
    SINGLE = "single"
    RANGE = "range"
    LIST = "list"


def _parse_status(value: str | None) -> ActionStatus | str | None:
    """Map a raw status string to ActionStatus, keeping unknown values as-is."""
    if value is None:
        return None
    try:
        return ActionStatus(value)
    except ValueError:
        return value


@dataclass(frozen=True, slots=True)
class StageInfo:
    """Snapshot of a pipeline stage, taken from its first action.

    Attributes:
        action_name: Name of the action inspected.
        stage_name: Name of the stage holding the action.
        status: Latest execution status of the action.
        token: Approval token, present only for pending manual approvals.
        last_status_change: When the action last changed status.
    """

    action_name: str
    stage_name: str
    status: ActionStatus | str
    token: str | None = None
    last_status_change: datetime | None = None

    @property
    def is_pending(self) -> bool:
        """Return True when the stage is waiting on an action (InProgress)."""
        return self.status == ActionStatus.IN_PROGRESS

    @classmethod
    def from_stage_state(cls, stage_state: dict[str, Any]) -> StageInfo | None:
        """Build a StageInfo from a ``GetPipelineState`` stage entry.

        Args:
            stage_state: One item of the ``stageStates`` list.

        Returns:
            The snapshot, or None if the stage's first action never executed.
        """
        actions = stage_state.get("actionStates") or []
        if not actions:
            return None
        action = actions[0]
        latest = action.get("latestExecution")
        if not latest or "status" not in latest:
            return None
        return cls(
            action_name=action.get("actionName", ""),
            stage_name=stage_state.get("stageName", ""),
            status=_parse_status(latest["status"]) or "",
            token=latest.get("token"),
            last_status_change=latest.get("lastStatusChange"),
        )


@dataclass(frozen=True, slots=True)
class ExecutionSummary:
    """Summary of the most recent execution of a pipeline.

    Attributes:
        pipeline_name: Name of the pipeline.
        execution_id: Identifier of the execution.
        status: Execution status.
        last_update_time: Time of the last status update.
        revision_summary: Summary of the first source revision, if any.
    """

    pipeline_name: str
    execution_id: str
    status: ActionStatus | str
    last_update_time: datetime | None = None
    revision_summary: str | None = None

    @classmethod
    def from_api(cls, pipeline_name: str, summary: dict[str, Any]) -> ExecutionSummary:
        """Build from a ``ListPipelineExecutions`` summary entry."""
        revisions = summary.get("sourceRevisions") or []
        revision_summary = revisions[0].get("revisionSummary") if revisions else None
        return cls(
            pipeline_name=pipeline_name,
            execution_id=summary.get("pipelineExecutionId", ""),
            status=_parse_status(summary.get("status")) or "",
            last_update_time=summary.get("lastUpdateTime"),
            revision_summary=revision_summary,
        )


@dataclass(frozen=True, slots=True)
class Selection:
    """Parsed user response.

    Attributes:
        kind: Which form the input took.
        indices: Selected 1-based indices, in the order given.
        decision: Decision to apply when approving.

    Examples:
        >>> Selection(kind=SelectionKind.SINGLE, indices=(2,)).indices
        (2,)
    """

    kind: SelectionKind
    indices: tuple[int, ...] = ()
    decision: ApprovalDecision = ApprovalDecision.APPROVED

    @property
    def is_cancel(self) -> bool:
        """Return True when the user declined to act."""
        return self.kind is SelectionKind.CANCEL


@dataclass(frozen=True, slots=True)
class Execution:
    """A started pipeline execution."""

    pipeline_name: str
    execution_id: str


@dataclass(frozen=True, slots=True)
class ApprovalResult:
    """A submitted approval decision."""

    pipeline_name: str
    stage_name: str
    decision: ApprovalDecision


__all__ = [
    "ActionStatus",
    "ApprovalDecision",
    "ApprovalResult",
    "Execution",
    "ExecutionSummary",
    "Selection",
    "SelectionKind",
    "StageInfo",
]
