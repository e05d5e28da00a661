"""AWS CodePipeline client used by every cph command.

Wraps the handful of CodePipeline (and STS) operations cph needs behind a
small synchronous class. Calls are strictly sequential; a failing call
raises immediately and nothing after it in a batch is attempted.

Examples:
    Use the default credential chain (``AWS_PROFILE`` is honoured)::

        client = PipelineClient.from_session(region="eu-west-1")
        for name in client.list_pipeline_names("deploy"):
            print(name)

    Inject prebuilt boto3 clients (tests, custom sessions)::

        client = PipelineClient(codepipeline_client, sts_client)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    NoCredentialsError,
    NoRegionError,
    PartialCredentialsError,
    ProfileNotFound,
)

from cph.exceptions import RemoteCallError, SessionError
from cph.logging import TRACE_LEVEL
from cph.models import ActionStatus, ApprovalDecision, ApprovalResult, Execution, ExecutionSummary, StageInfo

__all__ = ["APPROVAL_SUMMARY_LIMIT", "PipelineClient"]

log = logging.getLogger(__name__)

# PutApprovalResult rejects longer summaries
APPROVAL_SUMMARY_LIMIT = 512

_SESSION_ERRORS = (NoCredentialsError, PartialCredentialsError, NoRegionError, ProfileNotFound)

T = TypeVar("T")


class PipelineClient:
    """Synchronous facade over the CodePipeline API.

    Args:
        codepipeline: A boto3 ``codepipeline`` client.
        sts: A boto3 ``sts`` client. Only needed for approvals (caller identity in the summary).
        page_size: Page size for ``ListPipelines``.
    """

    def __init__(
        self,
        codepipeline: Any,
        sts: Any | None = None,
        *,
        page_size: int = 100,
    ) -> None:
        self._codepipeline = codepipeline
        self._sts = sts
        self._page_size = page_size
        self._caller_identity: str | None = None

    @classmethod
    def from_session(
        cls,
        *,
        profile: str | None = None,
        region: str | None = None,
        timeout: float = 30.0,
        page_size: int = 100,
    ) -> PipelineClient:
        """Create a client from a boto3 session.

        Args:
            profile: Named profile from the shared AWS config. ``None`` uses
                the default chain, which honours ``AWS_PROFILE``.
            region: Region override.
            timeout: Connect/read timeout in seconds.
            page_size: Page size for ``ListPipelines``.

        Returns:
            A ready client.

        Raises:
            SessionError: If the profile does not exist or no region is set.
        """
        log.debug("Creating AWS session (profile=%s, region=%s)", profile or "<default>", region or "<default>")
        try:
            session = boto3.Session(profile_name=profile, region_name=region)
            config = BotoConfig(connect_timeout=timeout, read_timeout=timeout)
            codepipeline = session.client("codepipeline", config=config)
            sts = session.client("sts", config=config)
        except _SESSION_ERRORS as e:
            raise SessionError(f"Cannot create AWS session: {e}") from e

        return cls(codepipeline, sts, page_size=page_size)

    def _call(self, operation: str, func: Callable[[], T], *, pipeline_name: str | None = None) -> T:
        """Run one API call, translating botocore errors.

        Raises:
            SessionError: On credential or region problems.
            RemoteCallError: On any other API or transport failure.
        """
        trace_enabled = log.isEnabledFor(TRACE_LEVEL)
        if trace_enabled:
            log.log(TRACE_LEVEL, "[AWS] %s (pipeline=%s)", operation, pipeline_name)
        try:
            result = func()
        except _SESSION_ERRORS as e:
            if trace_enabled:
                log.log(TRACE_LEVEL, "[AWS] %s session error: %s", operation, e)
            raise SessionError(f"AWS credentials not available: {e}") from e
        except ClientError as e:
            error_msg = e.response.get("Error", {}).get("Message", str(e))
            if trace_enabled:
                log.log(TRACE_LEVEL, "[AWS] %s ClientError: %s", operation, error_msg)
            raise RemoteCallError(operation, error_msg, pipeline_name=pipeline_name) from e
        except BotoCoreError as e:
            if trace_enabled:
                log.log(TRACE_LEVEL, "[AWS] %s BotoCoreError: %s", operation, e)
            raise RemoteCallError(operation, str(e), pipeline_name=pipeline_name) from e
        if trace_enabled:
            log.log(TRACE_LEVEL, "[AWS] %s response: %r", operation, result)
        return result

    # ─────────────────────────────────────────────────────────────────────
    # Read operations
    # ─────────────────────────────────────────────────────────────────────

    def list_pipeline_names(self, name_filter: str = "") -> list[str]:
        """Return pipeline names containing ``name_filter``.

        The match is a case-sensitive substring test; an empty filter
        returns every pipeline. Order is the order the service returns.

        Args:
            name_filter: Substring to look for in pipeline names.

        Returns:
            Matching pipeline names.
        """

        def fetch() -> list[str]:
            paginator = self._codepipeline.get_paginator("list_pipelines")
            names: list[str] = []
            for page in paginator.paginate(PaginationConfig={"PageSize": self._page_size}):
                names.extend(p["name"] for p in page.get("pipelines", []))
            return names

        names = self._call("ListPipelines", fetch)
        matches = [name for name in names if name_filter in name] if name_filter else names
        log.debug("Found %d pipeline(s), %d matching %r", len(names), len(matches), name_filter)
        return matches

    def get_latest_execution_summary(self, name: str) -> ExecutionSummary | None:
        """Return the most recent execution of a pipeline.

        Args:
            name: Pipeline name.

        Returns:
            The summary, or None when the pipeline has never run.
        """
        response = self._call(
            "ListPipelineExecutions",
            lambda: self._codepipeline.list_pipeline_executions(pipelineName=name, maxResults=1),
            pipeline_name=name,
        )
        summaries = response.get("pipelineExecutionSummaries") or []
        if not summaries:
            return None
        return ExecutionSummary.from_api(name, summaries[0])

    def get_active_stage(self, name: str) -> StageInfo | None:
        """Return the stage the pipeline is at, or the last one that changed.

        Stages are inspected through their first action. The first stage
        whose action is InProgress or Failed is returned immediately.
        Otherwise the stage with the latest ``lastStatusChange`` wins, and
        on equal timestamps the stage declared later in the pipeline wins.

        Args:
            name: Pipeline name.

        Returns:
            The stage snapshot, or None when no action has ever executed.
        """
        response = self._call(
            "GetPipelineState",
            lambda: self._codepipeline.get_pipeline_state(name=name),
            pipeline_name=name,
        )

        latest: StageInfo | None = None
        for stage_state in response.get("stageStates") or []:
            info = StageInfo.from_stage_state(stage_state)
            if info is None:
                continue
            if isinstance(info.status, ActionStatus) and info.status.is_current:
                return info
            if latest is None or _is_newer_or_equal(info, latest):
                latest = info
        return latest

    def get_caller_identity(self) -> str:
        """Return the ARN of the calling identity (cached per client)."""
        if self._caller_identity is None:
            if self._sts is None:
                raise SessionError("No STS client configured")
            response = self._call("GetCallerIdentity", self._sts.get_caller_identity)
            self._caller_identity = response.get("Arn", "unknown")
        return self._caller_identity

    # ─────────────────────────────────────────────────────────────────────
    # Mutations
    # ─────────────────────────────────────────────────────────────────────

    def start_execution(self, name: str) -> str:
        """Start a pipeline and return the new execution ID."""
        response = self._call(
            "StartPipelineExecution",
            lambda: self._codepipeline.start_pipeline_execution(name=name),
            pipeline_name=name,
        )
        execution_id = response["pipelineExecutionId"]
        log.info("Started %s (execution %s)", name, execution_id)
        return execution_id

    def start_executions(self, names: Iterable[str]) -> list[Execution]:
        """Start several pipelines in order, stopping at the first failure.

        Raises:
            RemoteCallError: On the first failing start; later pipelines are
                not attempted.
        """
        return [Execution(pipeline_name=name, execution_id=self.start_execution(name)) for name in names]

    def build_approval_summary(self, decision: ApprovalDecision, message: str = "") -> str:
        """Build the summary recorded with an approval decision."""
        summary = f"{decision.value} with cph by {self.get_caller_identity()}"
        if message:
            summary = f"{summary}: {message}"
        return summary[:APPROVAL_SUMMARY_LIMIT]

    def submit_approval(
        self,
        name: str,
        stage: StageInfo,
        decision: ApprovalDecision,
        message: str = "",
    ) -> ApprovalResult:
        """Approve or reject the pending action of a stage.

        Args:
            name: Pipeline name.
            stage: Stage holding the pending approval (token required).
            decision: Approved or Rejected.
            message: Optional text appended to the summary (e.g. a change
                order number).

        Returns:
            The submitted decision.

        Raises:
            RemoteCallError: If the stage has no token or the call fails.
        """
        if not stage.token:
            raise RemoteCallError(
                "PutApprovalResult",
                f"stage '{stage.stage_name}' has no pending approval token",
                pipeline_name=name,
            )
        summary = self.build_approval_summary(decision, message)
        self._call(
            "PutApprovalResult",
            lambda: self._codepipeline.put_approval_result(
                pipelineName=name,
                stageName=stage.stage_name,
                actionName=stage.action_name,
                result={"summary": summary, "status": decision.value},
                token=stage.token,
            ),
            pipeline_name=name,
        )
        log.info("%s %s at stage %s", decision.value, name, stage.stage_name)
        return ApprovalResult(pipeline_name=name, stage_name=stage.stage_name, decision=decision)

    def submit_approvals(
        self,
        stages: Iterable[tuple[str, StageInfo]],
        decision: ApprovalDecision,
        message: str = "",
    ) -> list[ApprovalResult]:
        """Submit the same decision for several pipelines, stopping at the first failure.

        Args:
            stages: ``(pipeline_name, stage)`` pairs, in submission order.
            decision: Approved or Rejected.
            message: Optional text appended to every summary.

        Raises:
            RemoteCallError: On the first failing submission.
        """
        return [self.submit_approval(name, stage, decision, message) for name, stage in stages]


def _is_newer_or_equal(candidate: StageInfo, current: StageInfo) -> bool:
    if candidate.last_status_change is None:
        return current.last_status_change is None
    if current.last_status_change is None:
        return True
    return candidate.last_status_change >= current.last_status_change
