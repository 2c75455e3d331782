import json
import pytest

from agent_pipelines.common.errors import MemoryGenerationError, ServiceError
from agent_pipelines.agent_service.common.types.context import AgentContext
from agent_pipelines.agent_service.common.types.completion_profiles import MEMORY_OPTIONS
from agent_pipelines.memory.memory_engine import MemoryEngine

@pytest.mark.asyncio
async def test_generate_builds_scored_memory(make_client, memory_response):
    client = make_client({"memory": f"Sure:\n```json\n{memory_response}\n```"})
    engine = MemoryEngine(client)
    context = AgentContext(user_prompt="fix startup crash", max_steps=7, results={"interpretation": "x"})

    memory = await engine.generate("interpreter", "the interpretation", "fix startup crash", context)

    assert memory.agent_role == "interpreter"
    assert memory.memory_type == "requirements-analysis"
    assert memory.content["key_insights"] == ["User wants a startup crash fixed"]
    # "startup" and "crash" both appear in the content; "fix" is too short to count
    assert memory.relevance_score == 2
    assert {"core-interpretation", "permanent-retention"} <= memory.retention_flags

    _, _, options = client.calls[0]
    assert options == MEMORY_OPTIONS

@pytest.mark.asyncio
async def test_generate_truncates_serialized_output(make_client, memory_response):
    client = make_client({"memory": memory_response})
    engine = MemoryEngine(client)
    context = AgentContext(user_prompt="p", max_steps=1)

    await engine.generate("coder", "x" * 5000, "p", context)

    _, messages, _ = client.calls[0]
    # the json-encoded string keeps its opening quote, leaving room for 1999 characters
    assert "x" * 1999 in messages[1].content
    assert "x" * 2000 not in messages[1].content

@pytest.mark.asyncio
async def test_unparseable_response_raises(make_client):
    engine = MemoryEngine(make_client({"memory": "I could not produce JSON today."}))
    with pytest.raises(MemoryGenerationError):
        await engine.generate("coder", "out", "prompt", AgentContext(user_prompt="prompt", max_steps=1))

@pytest.mark.asyncio
async def test_invalid_schema_raises(make_client):
    engine = MemoryEngine(make_client({"memory": json.dumps({"key_insights": {"nested": "object"}})}))
    with pytest.raises(MemoryGenerationError):
        await engine.generate("coder", "out", "prompt", AgentContext(user_prompt="prompt", max_steps=1))

@pytest.mark.asyncio
async def test_completion_failure_raises(make_client):
    engine = MemoryEngine(make_client({"memory": ServiceError("timeout", provider="xai")}))
    with pytest.raises(MemoryGenerationError):
        await engine.generate("coder", "out", "prompt", AgentContext(user_prompt="prompt", max_steps=1))

@pytest.mark.asyncio
async def test_unknown_role_gets_general_memory_type(make_client, memory_response):
    engine = MemoryEngine(make_client({"memory": memory_response}))
    memory = await engine.generate("documenter", "out", "prompt", AgentContext(user_prompt="prompt", max_steps=1))
    assert memory.memory_type == "general-experience"

def test_relevance_counts_long_prompt_words():
    content = {"notes": ["the database migration failed"]}
    assert MemoryEngine.calculate_relevance(content, "Database MIGRATION is slow") == 2

def test_relevance_ignores_short_words():
    assert MemoryEngine.calculate_relevance({"notes": ["a bug in api"]}, "bug api fix") == 0

def test_relevance_is_monotonic_and_clamped():
    words = [f"keyword{i}" for i in range(15)]
    content = {"notes": words}
    scores = [MemoryEngine.calculate_relevance(content, " ".join(words[:n])) for n in range(0, 16)]
    assert scores == sorted(scores)
    assert scores[5] == 5
    assert max(scores) == 10

def test_retention_flags_by_role():
    neutral = {"notes": ["all good"]}
    assert MemoryEngine.determine_retention_flags("interpreter", neutral) == {"core-interpretation", "permanent-retention"}
    assert MemoryEngine.determine_retention_flags("coder", neutral) == {"implementation-patterns", "technical-decisions"}
    assert MemoryEngine.determine_retention_flags("analysis", neutral) == {"implementation-patterns", "technical-decisions"}
    assert MemoryEngine.determine_retention_flags("quality-judge", neutral) == {"quality-insights", "error-prevention"}
    assert MemoryEngine.determine_retention_flags("supervisor", neutral) == frozenset()

def test_problem_resolution_flag_is_case_sensitive():
    assert "problem-resolution" in MemoryEngine.determine_retention_flags("supervisor", {"notes": ["a bug was found"]})
    assert "problem-resolution" not in MemoryEngine.determine_retention_flags("supervisor", {"notes": ["A BUG WAS FOUND"]})

@pytest.mark.asyncio
async def test_bare_string_fields_are_wrapped(make_client):
    payload = json.dumps({"key_insights": "one insight only", "learnings": None, "technical_decisions": ["a", "b"]})
    engine = MemoryEngine(make_client({"memory": payload}))

    memory = await engine.generate("coder", "out", "prompt", AgentContext(user_prompt="prompt", max_steps=1))

    assert memory.content["key_insights"] == ["one insight only"]
    assert memory.content["learnings"] == []
    assert memory.content["technical_decisions"] == ["a", "b"]
