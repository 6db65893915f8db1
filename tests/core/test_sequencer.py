from __future__ import annotations

import asyncio

import pytest

from gitdispatch import (
    CallStyle,
    ChainAbortedError,
    ChainSequencer,
    GitCommand,
    Task,
    TaskQueueExecutor,
)
from gitdispatch.errors import GitProcessError


def run_async(coro):
    return asyncio.run(coro)


class EventRunner:
    """Runner appending start/end events to a shared log."""

    def __init__(self, events: list[str], script: dict[str, tuple[float, object]]) -> None:
        self.events = events
        self.script = script
        self.calls: list[str] = []

    async def run(self, command: GitCommand) -> str:
        key = command.args[0]
        self.calls.append(key)
        self.events.append(f"start:{key}")
        delay, outcome = self.script[key]
        await asyncio.sleep(delay)
        self.events.append(f"end:{key}")
        if isinstance(outcome, BaseException):
            raise outcome
        return str(outcome)


def _chained(key: str, handler) -> Task:
    return Task(
        name=key,
        command=GitCommand(args=(key,)),
        handler=handler,
        style=CallStyle.CHAINED,
    )


def _recorder(events: list[str], outcomes: dict[str, tuple], key: str):
    def handler(*args):
        events.append(f"handler:{key}")
        outcomes[key] = args

    return handler


def test_chained_steps_run_in_order_without_overlap():
    events: list[str] = []
    outcomes: dict[str, tuple] = {}
    runner = EventRunner(
        events, {"T1": (0.03, "one"), "T2": (0.01, "two"), "T3": (0.0, "three")}
    )
    # Executor concurrency only bounds direct groups.
    sequencer = ChainSequencer(TaskQueueExecutor(runner, concurrency=4))

    async def scenario():
        for key in ("T1", "T2", "T3"):
            sequencer.enqueue(_chained(key, _recorder(events, outcomes, key)))
        assert sequencer.pending_count == 3
        await sequencer.join()

    run_async(scenario())
    assert events == [
        "start:T1", "end:T1", "handler:T1",
        "start:T2", "end:T2", "handler:T2",
        "start:T3", "end:T3", "handler:T3",
    ]
    assert outcomes == {"T1": (None, "one"), "T2": (None, "two"), "T3": (None, "three")}
    assert sequencer.pending_count == 0
    assert sequencer.is_idle


def test_continue_policy_runs_steps_after_a_failure():
    events: list[str] = []
    outcomes: dict[str, tuple] = {}
    error = GitProcessError("clone failed", exit_code=128)
    runner = EventRunner(events, {"clone": (0.01, error), "status": (0.0, "clean")})
    sequencer = ChainSequencer(TaskQueueExecutor(runner), failure_policy="continue")

    async def scenario():
        sequencer.enqueue(_chained("clone", _recorder(events, outcomes, "clone")))
        sequencer.enqueue(_chained("status", _recorder(events, outcomes, "status")))
        await sequencer.join()

    run_async(scenario())
    assert runner.calls == ["clone", "status"]
    assert events.index("handler:clone") < events.index("start:status")
    # Failure delivers the error alone; success delivers (None, result).
    assert outcomes["clone"] == (error,)
    assert outcomes["status"] == (None, "clean")


def test_abort_policy_skips_remaining_steps_after_a_failure():
    events: list[str] = []
    outcomes: dict[str, tuple] = {}
    error = GitProcessError("clone failed", exit_code=128)
    runner = EventRunner(
        events, {"clone": (0.01, error), "status": (0.0, "clean"), "stash": (0.0, "saved")}
    )
    sequencer = ChainSequencer(TaskQueueExecutor(runner), failure_policy="abort")

    async def scenario():
        for key in ("clone", "status", "stash"):
            sequencer.enqueue(_chained(key, _recorder(events, outcomes, key)))
        await sequencer.join()

    run_async(scenario())
    assert runner.calls == ["clone"]
    assert outcomes["clone"] == (error,)
    for key in ("status", "stash"):
        (skipped,) = outcomes[key]
        assert isinstance(skipped, ChainAbortedError)
        assert skipped.__cause__ is error
    assert sequencer.pending_count == 0


def test_abort_policy_resets_once_the_chain_drains():
    events: list[str] = []
    outcomes: dict[str, tuple] = {}
    runner = EventRunner(
        events, {"clone": (0.0, RuntimeError("nope")), "status": (0.0, "clean")}
    )
    sequencer = ChainSequencer(TaskQueueExecutor(runner), failure_policy="abort")

    async def scenario():
        sequencer.enqueue(_chained("clone", _recorder(events, outcomes, "clone")))
        await sequencer.join()
        sequencer.enqueue(_chained("status", _recorder(events, outcomes, "status")))
        await sequencer.join()

    run_async(scenario())
    assert runner.calls == ["clone", "status"]
    assert outcomes["status"] == (None, "clean")


def test_handler_errors_do_not_stop_the_chain():
    events: list[str] = []
    outcomes: dict[str, tuple] = {}
    runner = EventRunner(events, {"T1": (0.0, "one"), "T2": (0.0, "two")})
    sequencer = ChainSequencer(TaskQueueExecutor(runner))

    def exploding(*args):
        raise RuntimeError("handler bug")

    async def scenario():
        sequencer.enqueue(_chained("T1", exploding))
        sequencer.enqueue(_chained("T2", _recorder(events, outcomes, "T2")))
        await sequencer.join()

    run_async(scenario())
    assert outcomes["T2"] == (None, "two")


def test_async_handlers_complete_before_the_next_step_starts():
    events: list[str] = []
    runner = EventRunner(events, {"T1": (0.0, "one"), "T2": (0.0, "two")})
    sequencer = ChainSequencer(TaskQueueExecutor(runner))

    async def slow_handler(error, result=None):
        await asyncio.sleep(0.02)
        events.append("handler:T1")

    async def scenario():
        sequencer.enqueue(_chained("T1", slow_handler))
        sequencer.enqueue(_chained("T2", lambda *args: events.append("handler:T2")))
        await sequencer.join()

    run_async(scenario())
    assert events == ["start:T1", "end:T1", "handler:T1", "start:T2", "end:T2", "handler:T2"]


def test_steps_appended_while_running_join_the_same_chain():
    events: list[str] = []
    outcomes: dict[str, tuple] = {}
    runner = EventRunner(
        events, {"T1": (0.01, "one"), "T2": (0.01, "two"), "T3": (0.0, "three")}
    )
    sequencer = ChainSequencer(TaskQueueExecutor(runner))

    def first_handler(*args):
        events.append("handler:T1")
        sequencer.enqueue(_chained("T3", _recorder(events, outcomes, "T3")))

    async def scenario():
        sequencer.enqueue(_chained("T1", first_handler))
        sequencer.enqueue(_chained("T2", _recorder(events, outcomes, "T2")))
        await sequencer.join()

    run_async(scenario())
    assert runner.calls == ["T1", "T2", "T3"]
    assert outcomes["T3"] == (None, "three")


def test_direct_tasks_cannot_be_chained():
    sequencer = ChainSequencer(TaskQueueExecutor(EventRunner([], {})))
    task = Task(name="status", command=GitCommand(args=("status",)))

    async def scenario():
        with pytest.raises(ValueError, match="cannot be chained"):
            sequencer.enqueue(task)

    run_async(scenario())


def test_unknown_failure_policy_is_rejected():
    with pytest.raises(ValueError, match="failure policy"):
        ChainSequencer(TaskQueueExecutor(EventRunner([], {})), failure_policy="retry")  # type: ignore[arg-type]


def test_sequencer_can_be_reused_from_a_new_event_loop():
    events: list[str] = []
    outcomes: dict[str, tuple] = {}
    runner = EventRunner(events, {"T1": (0.0, "one"), "T2": (0.0, "two")})
    sequencer = ChainSequencer(TaskQueueExecutor(runner))

    async def scenario(key: str):
        sequencer.enqueue(_chained(key, _recorder(events, outcomes, key)))
        await sequencer.join()

    run_async(scenario("T1"))
    run_async(scenario("T2"))

    assert runner.calls == ["T1", "T2"]
    assert outcomes == {"T1": (None, "one"), "T2": (None, "two")}
    assert sequencer.is_idle
