import json
import pytest

from agent_pipelines.common.errors import ServiceError
from agent_pipelines.agent_service.common.types.completion_profiles import PLANNING_OPTIONS, WORKFLOW_ANALYSIS_OPTIONS
from agent_pipelines.agent_service.orchestrator.intelligent_orchestrator import (
    FeedbackRetry,
    FeedbackRetryState,
    IntelligentOrchestrator,
    detect_feedback,
)
from agent_pipelines.agent_service.orchestrator.workflow_planner import WorkflowPlanner
from agent_pipelines.memory.memory_engine import MemoryEngine

def _plan(*steps: dict) -> str:
    return "```json\n" + json.dumps({"steps": list(steps)}) + "\n```"

def _step_kinds(client) -> list[str]:
    return [kind for kind in client.kinds() if kind != "memory"]

@pytest.fixture
def build_orchestrator(memory_store):
    def _build(client, max_steps: int = 10) -> IntelligentOrchestrator:
        return IntelligentOrchestrator(
            completion_client=client,
            memory_engine=MemoryEngine(client),
            memory_store=memory_store,
            planner=WorkflowPlanner(client),
            max_steps=max_steps,
        )
    return _build

@pytest.mark.asyncio
async def test_malformed_plan_falls_back_and_reaches_supervision(make_client, build_orchestrator):
    client = make_client({
        "interpreter": "User wants the startup crash fixed.",
        "planner": "Sorry, I cannot produce a plan right now.",
        "supervisor": "Crash fixed, summary attached.",
    })
    result = await build_orchestrator(client).execute("fix crash on startup")

    assert result.success is True
    assert result.final_result == "Crash fixed, summary attached."
    assert _step_kinds(client) == ["interpreter", "planner", "analysis", "coder", "judge", "supervisor"]
    assert list(result.context.results) == [
        "interpretation", "analysis_result", "coder_result", "judge_result", "final_summary",
    ]
    assert any(line.startswith("Workflow determined (fallback):") for line in result.execution_log)
    assert result.context.step_count == 5

    # fallback instructions embed the interpretation
    analysis_call = client.calls_of("analysis")[0]
    assert analysis_call[1][1].content == "Analyze codebase for: User wants the startup crash fixed."
    assert client.calls_of("planner")[0][2] == PLANNING_OPTIONS

@pytest.mark.asyncio
async def test_planner_failure_uses_fallback_plan(make_client, build_orchestrator):
    client = make_client({"planner": ServiceError("rate limited")})
    result = await build_orchestrator(client).execute("add logging")

    assert result.success is True
    assert _step_kinds(client) == ["interpreter", "planner", "analysis", "coder", "judge", "supervisor"]

@pytest.mark.asyncio
async def test_interpreter_failure_is_terminal(make_client, build_orchestrator):
    client = make_client({"interpreter": ServiceError("connection reset")})
    result = await build_orchestrator(client).execute("fix crash on startup")

    assert result.success is False
    assert result.final_result == "Interpretation failed - cannot determine next steps"
    assert result.context.errors == ["interpreter failed: connection reset"]
    assert result.execution_log[-1] == "Pipeline failed at interpretation stage"
    assert _step_kinds(client) == ["interpreter"]

@pytest.mark.asyncio
async def test_required_failure_skips_rest_but_supervisor_runs(make_client, build_orchestrator):
    client = make_client({
        "planner": _plan(
            {"agent": "analysis", "instructions": "look around", "required": True},
            {"agent": "coder", "instructions": "write it", "required": True},
            {"agent": "judge", "instructions": "review it", "required": False},
        ),
        "coder": ServiceError("timeout"),
        "supervisor": "Partial result.",
    })
    result = await build_orchestrator(client).execute("build a parser")

    assert _step_kinds(client) == ["interpreter", "planner", "analysis", "coder", "supervisor"]
    assert "Required step 'coder' failed - stopping workflow" in result.execution_log
    assert result.success is True
    assert result.final_result == "Partial result."

    supervision_input = client.calls_of("supervisor")[0][1][1].content
    assert "- Steps Completed: 2" in supervision_input
    assert "- Steps Failed: 1" in supervision_input

@pytest.mark.asyncio
async def test_optional_failure_continues(make_client, build_orchestrator):
    client = make_client({
        "planner": _plan(
            {"agent": "analysis", "instructions": "look around", "required": False},
            {"agent": "coder", "instructions": "write it"},
        ),
        "analysis": ServiceError("timeout"),
        "coder": "def parse(): ...",
        "supervisor": ServiceError("timeout"),
    })
    result = await build_orchestrator(client).execute("build a parser")

    assert _step_kinds(client) == ["interpreter", "planner", "analysis", "coder", "supervisor"]
    # supervisor outcome decides success; generated code is not under a final-result key
    assert result.success is False
    assert result.final_result == "Workflow completed"

@pytest.mark.asyncio
async def test_feedback_retry_happens_at_most_once(make_client, build_orchestrator):
    client = make_client({
        "planner": _plan(
            {"agent": "judge", "instructions": "review the module"},
            {
                "agent": "coder",
                "instructions": "rewrite the module",
                "iterative_feedback": True,
                "feedback_output": "judge_result",
            },
        ),
        "judge": "Found issues: fix needed in the retry loop.",
        "coder": "def module(): ...",
    })
    result = await build_orchestrator(client).execute("harden the module")

    coder_calls = client.calls_of("coder")
    assert len(coder_calls) == 2
    assert coder_calls[0][1][1].content == "rewrite the module"
    assert "PREVIOUS FEEDBACK FROM QUALITY CHECK:\nFound issues: fix needed in the retry loop." in coder_calls[1][1][1].content
    assert "Quality issues detected - sending feedback to coder for iteration" in result.execution_log

@pytest.mark.asyncio
async def test_failed_required_step_is_not_sent_feedback(make_client, build_orchestrator):
    client = make_client({
        "planner": _plan(
            {"agent": "judge", "instructions": "review the module", "required": False},
            {
                "agent": "coder",
                "instructions": "rewrite the module",
                "required": True,
                "iterative_feedback": True,
                "feedback_output": "judge_result",
            },
            {"agent": "analysis", "instructions": "document the change"},
        ),
        "judge": "Found issues in the retry loop.",
        "coder": ServiceError("down"),
    })
    result = await build_orchestrator(client).execute("harden the module")

    assert len(client.calls_of("coder")) == 1
    assert client.calls_of("analysis") == []
    assert result.context.errors == ["coder failed: down"]
    assert "Quality issues detected - sending feedback to coder for iteration" not in result.execution_log
    assert "Required step 'coder' failed - stopping workflow" in result.execution_log

    supervision_input = client.calls_of("supervisor")[0][1][1].content
    assert "- Steps Failed: 1" in supervision_input

@pytest.mark.asyncio
async def test_clean_feedback_does_not_retry(make_client, build_orchestrator):
    client = make_client({
        "planner": _plan(
            {"agent": "judge", "instructions": "review"},
            {"agent": "coder", "instructions": "write", "iterativeFeedback": True, "feedbackOutput": "judge_result"},
        ),
        "judge": "Looks great.",
    })
    await build_orchestrator(client).execute("harden the module")

    assert len(client.calls_of("coder")) == 1

@pytest.mark.asyncio
async def test_step_budget_reserves_supervisor_slot(make_client, build_orchestrator):
    client = make_client({
        "planner": _plan(
            {"agent": "analysis", "instructions": "a"},
            {"agent": "coder", "instructions": "b"},
            {"agent": "judge", "instructions": "c"},
        ),
    })
    result = await build_orchestrator(client, max_steps=3).execute("small budget")

    assert _step_kinds(client) == ["interpreter", "planner", "analysis", "supervisor"]
    assert "Step budget exhausted - skipping remaining steps: coder, judge" in result.execution_log
    assert result.context.step_count == 3 <= result.context.max_steps

@pytest.mark.asyncio
async def test_feedback_retry_skipped_when_budget_is_exhausted(make_client, build_orchestrator):
    client = make_client({
        "interpreter": "There are issues with the startup sequence.",
        "planner": _plan(
            {"agent": "coder", "instructions": "fix startup", "iterative_feedback": True, "feedback_output": "interpretation"},
        ),
    })
    result = await build_orchestrator(client, max_steps=3).execute("fix crash on startup")

    assert len(client.calls_of("coder")) == 1
    assert "Step budget exhausted - skipping feedback iteration for coder" in result.execution_log
    assert _step_kinds(client)[-1] == "supervisor"
    assert result.context.step_count <= result.context.max_steps

@pytest.mark.asyncio
async def test_unknown_planned_role_gets_generic_prompt(make_client, build_orchestrator):
    client = make_client({
        "planner": json.dumps([{"agent": "documenter", "instructions": "write docs", "required": False}]),
    })
    result = await build_orchestrator(client).execute("document it")

    assert "documenter" in _step_kinds(client)
    assert "documenter_result" in result.context.results

@pytest.mark.asyncio
async def test_memories_are_stored_under_intelligent_pipeline(make_client, memory_response, memory_store, build_orchestrator):
    client = make_client({"memory": memory_response})
    result = await build_orchestrator(client).execute("fix crash on startup")

    assert set(result.agent_memories) == {
        "interpreter-agent", "analysis-agent", "coder-agent", "judge-agent", "supervisor-agent",
    }
    assert len(memory_store.memories_for_pipeline("intelligent-orchestration")) == 5

    memory_inputs = [call[1][1].content for call in client.calls_of("memory")]
    assert all('"instructions"' in text and '"response"' in text for text in memory_inputs)

@pytest.mark.asyncio
async def test_analyze_workflow_choice_is_a_dry_run(make_client, build_orchestrator):
    client = make_client({"workflow-analysis": "Use analysis then coder."})
    analysis = await build_orchestrator(client).analyze_workflow_choice("add a cache")

    assert analysis == "Use analysis then coder."
    assert client.kinds() == ["workflow-analysis"]
    assert client.calls[0][2] == WORKFLOW_ANALYSIS_OPTIONS

def test_feedback_retry_is_one_shot():
    retry = FeedbackRetry()
    assert retry.can_retry()
    retry.mark_retried()
    assert retry.state is FeedbackRetryState.RETRIED
    assert not retry.can_retry()
    retry.finish()
    assert retry.state is FeedbackRetryState.DONE
    assert not retry.can_retry()

@pytest.mark.parametrize("text,expected", [
    ("Found an ERROR in line 3", True),
    ("There are Issues here", True),
    ("fix needed", True),
    ("Looks great", False),
    ("", False),
    (None, False),
])
def test_detect_feedback(text, expected):
    assert detect_feedback(text) is expected
