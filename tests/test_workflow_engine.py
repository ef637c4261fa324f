"""
In-process workflow engine: lifecycle transitions, monotonic status,
unknown ids and resumption after a restart.
"""

import asyncio

import pytest

from memoflow.errors import NotFound
from memoflow.models import WorkflowState
from memoflow.services.workflows import WorkflowEngine


class EchoWorkflow:
    name = "echo"

    async def run(self, params):
        await asyncio.sleep(0)
        return {"echo": params}


class BrokenWorkflow:
    name = "broken"

    async def run(self, params):
        raise RuntimeError("upstream exploded")


class SlowWorkflow:
    name = "slow"

    async def run(self, params):
        await asyncio.sleep(5)
        return "never"


def _engine(store, *workflows, timeout=5.0):
    engine = WorkflowEngine(store, max_concurrency=2, timeout_seconds=timeout)
    for workflow in workflows:
        engine.register(workflow)
    return engine


def test_create_reports_queued_then_succeeds(workflow_store):
    engine = _engine(workflow_store, EchoWorkflow())

    async def scenario():
        binding = engine.binding("echo")
        instance = await binding.create({"url": "https://example.com/a"})
        initial = await instance.status()
        await engine.wait_idle()
        return instance, initial, await (await binding.get(instance.id)).status()

    instance, initial, final = asyncio.run(scenario())

    assert instance.id.startswith("wf-")
    assert initial.status is WorkflowState.QUEUED
    assert final.status is WorkflowState.SUCCEEDED
    assert final.output == {"echo": {"url": "https://example.com/a"}}
    assert final.error is None


def test_failure_is_recorded_with_error(workflow_store):
    engine = _engine(workflow_store, BrokenWorkflow())

    async def scenario():
        instance = await engine.create("broken", {})
        await engine.wait_idle()
        return await instance.status()

    status = asyncio.run(scenario())

    assert status.status is WorkflowState.FAILED
    assert status.error == "upstream exploded"


def test_runs_past_the_deadline_fail(workflow_store):
    engine = _engine(workflow_store, SlowWorkflow(), timeout=0.05)

    async def scenario():
        instance = await engine.create("slow", {})
        await engine.wait_idle()
        return await instance.status()

    status = asyncio.run(scenario())

    assert status.status is WorkflowState.FAILED
    assert "timed out" in status.error


def test_terminal_status_never_regresses(workflow_store):
    engine = _engine(workflow_store, EchoWorkflow())

    async def scenario():
        instance = await engine.create("echo", {"n": 1})
        await engine.wait_idle()
        return instance

    instance = asyncio.run(scenario())
    moved = workflow_store.transition(
        instance.id,
        WorkflowState.RUNNING,
        sources=tuple(WorkflowState),
    )

    assert moved is False
    assert engine.status_of(instance.id).status is WorkflowState.SUCCEEDED


def test_observed_states_only_move_forward(workflow_store):
    engine = _engine(workflow_store, EchoWorkflow())
    order = [WorkflowState.QUEUED, WorkflowState.RUNNING, WorkflowState.SUCCEEDED]

    async def scenario():
        instance = await engine.create("echo", {})
        seen = [(await instance.status()).status]
        for _ in range(10):
            await asyncio.sleep(0)
            seen.append((await instance.status()).status)
        await engine.wait_idle()
        seen.append((await instance.status()).status)
        return seen

    seen = asyncio.run(scenario())

    positions = [order.index(state) for state in seen]
    assert positions == sorted(positions)
    assert seen[-1] is WorkflowState.SUCCEEDED


def test_unknown_instance_raises_not_found(workflow_store):
    engine = _engine(workflow_store, EchoWorkflow())

    with pytest.raises(NotFound):
        asyncio.run(engine.get("wf-missing"))


def test_instance_of_another_workflow_is_not_visible_through_binding(workflow_store):
    engine = _engine(workflow_store, EchoWorkflow(), BrokenWorkflow())

    async def scenario():
        instance = await engine.create("echo", {})
        await engine.wait_idle()
        await engine.binding("broken").get(instance.id)

    with pytest.raises(NotFound):
        asyncio.run(scenario())


def test_unfinished_instances_resume_on_start(workflow_store):
    queued = workflow_store.insert("wf-left-behind", "echo", {"url": "https://example.com/b"})
    engine = _engine(workflow_store, EchoWorkflow())

    async def scenario():
        await engine.start()
        await engine.wait_idle()

    asyncio.run(scenario())

    status = engine.status_of(queued.id)
    assert status.status is WorkflowState.SUCCEEDED
    assert status.output == {"echo": {"url": "https://example.com/b"}}


def test_stop_leaves_running_instances_resumable(workflow_store):
    first = _engine(workflow_store, SlowWorkflow())

    async def interrupted():
        instance = await first.create("slow", {})
        for _ in range(5):
            await asyncio.sleep(0)
        await first.stop()
        return instance

    instance = asyncio.run(interrupted())
    assert first.status_of(instance.id).status is WorkflowState.RUNNING

    class QuickSlow(EchoWorkflow):
        name = "slow"

    second = _engine(workflow_store, QuickSlow())

    async def resumed():
        await second.start()
        await second.wait_idle()

    asyncio.run(resumed())
    assert second.status_of(instance.id).status is WorkflowState.SUCCEEDED
