# process-wide, append-only memory store shared by orchestrator instances

import re
import threading
import time
from collections import OrderedDict

from agent_pipelines.memory.types import AgentMemory

class MemoryStore():
    """
    Maps a run key (pipeline id + run timestamp) to the memories that run produced.
    - constructed once per process (see core.lifespan) and injected into orchestrators
    - append-only: keys are never overwritten, records are never deleted
    NOTE: the lock only guards key allocation + insertion; reads copy under the same lock.
    """
    KEY_PREFIX = "pipeline-"

    def __init__(self):
        self._runs: OrderedDict[str, list[AgentMemory]] = OrderedDict()
        self._lock = threading.Lock()

    @classmethod
    def pipeline_prefix(cls, pipeline_id: str) -> str:
        return f"{cls.KEY_PREFIX}{pipeline_id}-"

    @classmethod
    def _run_key_pattern(cls, pipeline_id: str) -> re.Pattern:
        # prefix + epoch ms (+ collision suffix); keeps "code" from matching runs of "code-development"
        return re.compile(rf"{re.escape(cls.pipeline_prefix(pipeline_id))}\d+(-\d+)?")

    def put(self, key: str, memories: list[AgentMemory]) -> str:
        """Insert memories under key; a colliding key gets a numeric suffix. Returns the key used."""
        with self._lock:
            final_key = key
            suffix = 1
            while final_key in self._runs:
                final_key = f"{key}-{suffix}"
                suffix += 1
            self._runs[final_key] = list(memories)
            return final_key

    def store_run(self, pipeline_id: str, agent_memories: dict[str, list[AgentMemory]]) -> str:
        """Flatten a run's per-agent memories and store them under pipeline-{id}-{epoch ms}."""
        flattened = [memory for memories in agent_memories.values() for memory in memories]
        key = f"{self.pipeline_prefix(pipeline_id)}{int(time.time() * 1000)}"
        return self.put(key, flattened)

    def query_by_prefix(self, prefix: str) -> list[AgentMemory]:
        with self._lock:
            return [
                memory
                for key, memories in self._runs.items() if key.startswith(prefix)
                for memory in memories
            ]

    def memories_for_pipeline(self, pipeline_id: str) -> list[AgentMemory]:
        pattern = self._run_key_pattern(pipeline_id)
        with self._lock:
            return [
                memory
                for key, memories in self._runs.items() if pattern.fullmatch(key)
                for memory in memories
            ]

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._runs.keys())

    def __len__(self) -> int:
        with self._lock:
            return len(self._runs)
