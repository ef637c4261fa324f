import os
import tempfile

os.environ.setdefault("MEMOFLOW_DATA_DIR", tempfile.mkdtemp(prefix="memoflow-tests-"))
os.environ.setdefault("LLM_API_KEY", "test-key")

import pytest

from memoflow.services.memory import ActorStore, MemoryNamespace
from memoflow.services.workflows import WorkflowStore


@pytest.fixture
def actor_store(tmp_path):
    return ActorStore(tmp_path / "memory.db")


@pytest.fixture
def namespace(actor_store):
    return MemoryNamespace(actor_store, store_timeout=5.0)


@pytest.fixture
def workflow_store(tmp_path):
    return WorkflowStore(tmp_path / "workflows.db")


class PromptRecorder:
    """Stand-in for the inference capability that remembers every prompt."""

    def __init__(self, *answers):
        self.answers = list(answers) or ["ok"]
        self.prompts = []

    async def __call__(self, prompt):
        self.prompts.append(prompt)
        if len(self.answers) > 1:
            return self.answers.pop(0)
        return self.answers[0]


@pytest.fixture
def recorder():
    return PromptRecorder
