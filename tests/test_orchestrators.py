"""Tests for cph.orchestrators."""

from __future__ import annotations

import io
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import pytest
from rich.console import Console

from cph.client import PipelineClient
from cph.exceptions import OutOfRangeError, RemoteCallError, UnrecognizedInputError
from cph.models import ApprovalDecision
from cph.orchestrators import approve_pipelines, list_pipelines, run_pipelines
from cph.prompt import LineReader

UPDATED = datetime(2024, 3, 4, 5, 6, 7, tzinfo=timezone.utc)


def _reader(console: Console, *lines: str) -> LineReader:
    return LineReader(console, io.StringIO("".join(f"{line}\n" for line in lines)))


class TestListPipelines:
    """Tests for list_pipelines."""

    def test_no_match_prints_only_header(
        self,
        make_client: Callable[..., PipelineClient],
        console: Console,
        output: Callable[[], str],
    ) -> None:
        """With zero matches the table header is all that is printed."""
        client = make_client(["build-api"])

        rows = list_pipelines(client, console, name_filter="deploy")

        assert rows == []
        lines = [line for line in output().splitlines() if line.strip()]
        assert len(lines) == 1
        for header in ("Name", "Status", "Last Update", "Revision"):
            assert header in lines[0]

    def test_rows(
        self,
        make_client: Callable[..., PipelineClient],
        stage_state: Callable[..., dict[str, Any]],
        console: Console,
        output: Callable[[], str],
    ) -> None:
        """Each row shows status with stage, local timestamp and revision."""
        client = make_client(
            ["deploy-api", "deploy-web"],
            states={"deploy-api": [stage_state("Deploy", "Failed")]},
            executions={
                "deploy-api": [
                    {
                        "pipelineExecutionId": "e1",
                        "status": "Failed",
                        "lastUpdateTime": UPDATED,
                        "sourceRevisions": [{"actionName": "Source", "revisionSummary": "Bump deps\nbody"}],
                    }
                ]
            },
        )

        rows = list_pipelines(client, console, date_format="%Y")

        assert [row.name for row in rows] == ["deploy-api", "deploy-web"]
        text = output()
        assert "Failed (Deploy)" in text
        assert UPDATED.astimezone().strftime("%Y") in text
        assert "Bump deps" in text
        assert "body" not in text
        web_line = next(line for line in text.splitlines() if "deploy-web" in line)
        assert web_line.split() == ["deploy-web", "-", "-", "-"]


class TestRunPipelines:
    """Tests for run_pipelines."""

    def test_single_selection_starts_one(
        self,
        make_client: Callable[..., PipelineClient],
        console: Console,
        output: Callable[[], str],
    ) -> None:
        """Entering 2 starts exactly the second listed pipeline."""
        client = make_client(["deploy-a", "deploy-b", "deploy-c"])

        executions = run_pipelines(client, _reader(console, "2"), console, name_filter="deploy")

        client._codepipeline.start_pipeline_execution.assert_called_once_with(name="deploy-b")
        assert [e.execution_id for e in executions] == ["exec-deploy-b"]
        text = output()
        assert "[1] deploy-a" in text
        assert "[3] deploy-c" in text
        assert "Execution ID" in text
        assert "exec-deploy-b" in text

    def test_yes_starts_all(self, make_client: Callable[..., PipelineClient], console: Console) -> None:
        """'yes' starts every listed pipeline in order."""
        client = make_client(["a", "b", "c"])

        executions = run_pipelines(client, _reader(console, "yes"), console)

        assert [e.pipeline_name for e in executions] == ["a", "b", "c"]

    def test_no_cancels(
        self,
        make_client: Callable[..., PipelineClient],
        console: Console,
        output: Callable[[], str],
    ) -> None:
        """'no' starts nothing."""
        client = make_client(["a", "b"])

        assert run_pipelines(client, _reader(console, "no"), console) == []
        client._codepipeline.start_pipeline_execution.assert_not_called()
        assert "Cancelled." in output()

    def test_selection_bypasses_prompt(self, make_client: Callable[..., PipelineClient], console: Console) -> None:
        """A selection given up front is used without reading input."""
        client = make_client(["a", "b", "c"])

        executions = run_pipelines(client, _reader(console), console, selection="1,3")

        assert [e.pipeline_name for e in executions] == ["a", "c"]

    def test_parse_error_makes_no_remote_mutation(
        self,
        make_client: Callable[..., PipelineClient],
        console: Console,
    ) -> None:
        """Invalid input fails before any start."""
        client = make_client(["a", "b"])

        with pytest.raises(OutOfRangeError):
            run_pipelines(client, _reader(console, "5"), console)
        client._codepipeline.start_pipeline_execution.assert_not_called()

    def test_closed_input_is_unrecognized(self, make_client: Callable[..., PipelineClient], console: Console) -> None:
        """End of input resolves to an empty, unrecognised answer."""
        client = make_client(["a"])

        with pytest.raises(UnrecognizedInputError):
            run_pipelines(client, _reader(console), console)

    def test_no_pipelines(
        self,
        make_client: Callable[..., PipelineClient],
        console: Console,
        output: Callable[[], str],
    ) -> None:
        """Nothing matching means no prompt and no action."""
        client = make_client(["a"])

        assert run_pipelines(client, _reader(console), console, name_filter="zzz") == []
        assert "No pipelines found." in output()
        assert "Do you want to run" not in output()


def _approve_fixture(
    make_client: Callable[..., PipelineClient],
    stage_state: Callable[..., dict[str, Any]],
) -> PipelineClient:
    """Five release pipelines, two waiting on approval (r2, r4)."""
    states = {
        "r1": [stage_state("Deploy", "Succeeded")],
        "r2": [stage_state("Source", "Succeeded"), stage_state("Approval", "InProgress", token="t2")],
        "r3": [stage_state("Build", "Failed")],
        "r4": [stage_state("Gate", "InProgress", action_name="Sign-off", token="t4")],
        "r5": [],
    }
    return make_client(["r1", "r2", "r3", "r4", "r5"], states=states)


class TestApprovePipelines:
    """Tests for approve_pipelines."""

    def test_menu_lists_only_pending(
        self,
        make_client: Callable[..., PipelineClient],
        stage_state: Callable[..., dict[str, Any]],
        console: Console,
        output: Callable[[], str],
    ) -> None:
        """Only InProgress pipelines are offered, with their stage."""
        client = _approve_fixture(make_client, stage_state)

        approve_pipelines(client, _reader(console, "no"), console)

        text = output()
        assert "[1] r2 (Approval)" in text
        assert "[2] r4 (Gate)" in text
        for name in ("r1", "r3", "r5"):
            assert f"] {name}" not in text

    def test_yes_approves_all_pending(
        self,
        make_client: Callable[..., PipelineClient],
        stage_state: Callable[..., dict[str, Any]],
        console: Console,
    ) -> None:
        """'yes' submits exactly one approval per pending pipeline."""
        client = _approve_fixture(make_client, stage_state)

        results = approve_pipelines(client, _reader(console, "yes", ""), console)

        put = client._codepipeline.put_approval_result
        assert put.call_count == 2
        assert [c.kwargs["pipelineName"] for c in put.call_args_list] == ["r2", "r4"]
        assert all(c.kwargs["result"]["status"] == "Approved" for c in put.call_args_list)
        assert put.call_args_list[1].kwargs["actionName"] == "Sign-off"
        assert put.call_args_list[1].kwargs["token"] == "t4"
        assert all(r.decision is ApprovalDecision.APPROVED for r in results)

    def test_reject_rejects_all(
        self,
        make_client: Callable[..., PipelineClient],
        stage_state: Callable[..., dict[str, Any]],
        console: Console,
        output: Callable[[], str],
    ) -> None:
        """'reject' submits rejections."""
        client = _approve_fixture(make_client, stage_state)

        results = approve_pipelines(client, _reader(console, "reject", ""), console)

        put = client._codepipeline.put_approval_result
        assert [c.kwargs["result"]["status"] for c in put.call_args_list] == ["Rejected", "Rejected"]
        assert len(results) == 2
        assert "Rejecting pipelines..." in output()

    def test_single_selection(
        self,
        make_client: Callable[..., PipelineClient],
        stage_state: Callable[..., dict[str, Any]],
        console: Console,
    ) -> None:
        """Entering 2 approves only the second pending pipeline."""
        client = _approve_fixture(make_client, stage_state)

        approve_pipelines(client, _reader(console, "2", ""), console)

        client._codepipeline.put_approval_result.assert_called_once()
        assert client._codepipeline.put_approval_result.call_args.kwargs["pipelineName"] == "r4"

    def test_message_prompted(
        self,
        make_client: Callable[..., PipelineClient],
        stage_state: Callable[..., dict[str, Any]],
        console: Console,
    ) -> None:
        """The second line is used as the approval message."""
        client = _approve_fixture(make_client, stage_state)

        approve_pipelines(client, _reader(console, "1", "CHG-7"), console)

        summary = client._codepipeline.put_approval_result.call_args.kwargs["result"]["summary"]
        assert summary.endswith(": CHG-7")

    def test_message_option_skips_prompt(
        self,
        make_client: Callable[..., PipelineClient],
        stage_state: Callable[..., dict[str, Any]],
        console: Console,
        output: Callable[[], str],
    ) -> None:
        """A message given up front is not asked for again."""
        client = _approve_fixture(make_client, stage_state)

        approve_pipelines(client, _reader(console, "1"), console, message="CHG-9")

        summary = client._codepipeline.put_approval_result.call_args.kwargs["result"]["summary"]
        assert summary.endswith(": CHG-9")
        assert "add a message" not in output()

    def test_no_pending(
        self,
        make_client: Callable[..., PipelineClient],
        stage_state: Callable[..., dict[str, Any]],
        console: Console,
        output: Callable[[], str],
    ) -> None:
        """No pending approval is informational."""
        client = make_client(["a"], states={"a": [stage_state("Deploy", "Succeeded")]})

        assert approve_pipelines(client, _reader(console), console) == []
        assert "No pipelines to approve." in output()

    def test_failure_aborts_batch(
        self,
        make_client: Callable[..., PipelineClient],
        stage_state: Callable[..., dict[str, Any]],
        console: Console,
    ) -> None:
        """A failing approval stops the rest of the batch."""
        client = _approve_fixture(make_client, stage_state)
        client._codepipeline.put_approval_result.side_effect = RemoteCallError("PutApprovalResult", "denied")

        with pytest.raises(RemoteCallError):
            approve_pipelines(client, _reader(console), console, selection="yes")
        assert client._codepipeline.put_approval_result.call_count == 1
