"""Shared pytest fixtures for the cph test suite."""

from __future__ import annotations

# Disable Rich colors and force wide terminal BEFORE any imports
# Rich checks these at import time
import os

os.environ["NO_COLOR"] = "1"
os.environ["TERM"] = "dumb"
os.environ["FORCE_COLOR"] = "0"
os.environ["COLUMNS"] = "200"  # Prevent text wrapping in CLI output

import io
from collections.abc import Callable, Iterator
from datetime import datetime, timezone
from typing import Any
from unittest.mock import MagicMock

import pytest
from rich.console import Console

from cph.client import PipelineClient

# pylint: disable=redefined-outer-name

T0 = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def _make_stage_state(
    stage_name: str,
    status: str | None,
    *,
    action_name: str = "Action",
    token: str | None = None,
    changed: datetime | None = T0,
) -> dict[str, Any]:
    """Build one ``stageStates`` entry as returned by GetPipelineState."""
    action: dict[str, Any] = {"actionName": action_name}
    if status is not None:
        latest: dict[str, Any] = {"status": status}
        if token:
            latest["token"] = token
        if changed is not None:
            latest["lastStatusChange"] = changed
        action["latestExecution"] = latest
    return {"stageName": stage_name, "actionStates": [action]}


def _make_codepipeline(
    names: list[str],
    *,
    states: dict[str, list[dict[str, Any]]] | None = None,
    executions: dict[str, list[dict[str, Any]]] | None = None,
) -> MagicMock:
    """Build a MagicMock standing in for a boto3 codepipeline client.

    Args:
        names: Pipeline names returned by ListPipelines (single page).
        states: ``stageStates`` per pipeline for GetPipelineState.
        executions: ``pipelineExecutionSummaries`` per pipeline.
    """
    states = states or {}
    executions = executions or {}

    mock = MagicMock()
    paginator = MagicMock()
    paginator.paginate.return_value = [{"pipelines": [{"name": n} for n in names]}]
    mock.get_paginator.return_value = paginator
    mock.get_pipeline_state.side_effect = lambda name: {
        "pipelineName": name,
        "stageStates": states.get(name, []),
    }
    mock.list_pipeline_executions.side_effect = lambda pipelineName, maxResults: {
        "pipelineExecutionSummaries": executions.get(pipelineName, [])[:maxResults],
    }
    mock.start_pipeline_execution.side_effect = lambda name: {"pipelineExecutionId": f"exec-{name}"}
    mock.put_approval_result.return_value = {"approvedAt": T0}
    return mock


@pytest.fixture
def make_client() -> Callable[..., PipelineClient]:
    """Return a factory building PipelineClients over mocked boto3 clients."""

    def _make(names: list[str], **kwargs: Any) -> PipelineClient:
        sts = MagicMock()
        sts.get_caller_identity.return_value = {"Arn": "arn:aws:iam::123456789012:user/alice"}
        return PipelineClient(_make_codepipeline(names, **kwargs), sts)

    return _make


@pytest.fixture
def console() -> Iterator[Console]:
    """A plain, wide console recording to a string buffer."""
    yield Console(file=io.StringIO(), width=200, color_system=None, highlight=False)


@pytest.fixture
def stage_state() -> Callable[..., dict[str, Any]]:
    """Return the ``stageStates`` entry builder."""
    return _make_stage_state


@pytest.fixture
def make_codepipeline() -> Callable[..., MagicMock]:
    """Return the mocked codepipeline client builder."""
    return _make_codepipeline


@pytest.fixture
def output(console: Console) -> Callable[[], str]:
    """Return a getter for everything printed on the ``console`` fixture."""
    return lambda: console.file.getvalue()  # type: ignore[attr-defined]
