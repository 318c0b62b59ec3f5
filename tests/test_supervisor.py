"""Dev runner command loop driven by scripted operator input."""

import asyncio
import itertools
import os
import sys

import pytest
import pytest_asyncio

from webapp.cli.supervisor import (
    HELP,
    ChildProcess,
    DevRunner,
    SupervisorError,
    SupervisorExit,
    SupervisorState,
    resolve_entry_point,
)


class FakeConsole:
    def __init__(self, answers=()):
        self.lines = []
        self.clears = 0
        self.answers = list(answers)
        self.questions = []

    def write(self, text, color=None):
        self.lines.append(text)

    def clear(self):
        self.clears += 1

    def read(self, prompt, is_required=False):
        self.questions.append(prompt)
        return self.answers.pop(0)


class FakeChild:
    _pids = itertools.count(1000)

    def __init__(self, args, cwd):
        self.args = args
        self.cwd = cwd
        self.pid = next(self._pids)
        self.stopped = False

    async def stop(self):
        self.stopped = True

    async def wait(self):
        return 0


class FakeSpawner:
    def __init__(self):
        self.children = []

    async def __call__(self, args, cwd):
        child = FakeChild(args, cwd)
        self.children.append(child)
        return child


async def _script(*lines):
    for line in lines:
        yield line


@pytest.fixture
def spawner():
    return FakeSpawner()


@pytest.fixture
def console():
    return FakeConsole()


@pytest_asyncio.fixture
async def runner(spawner, console):
    r = DevRunner("./lib/app.py", console=console, spawner=spawner)
    await r.start()
    return r


@pytest.mark.asyncio
async def test_start_spawns_child_in_dev_mode(runner, spawner):
    child = spawner.children[0]
    assert runner.state == SupervisorState.RUNNING
    assert runner.child is child
    assert child.args[1:] == ["-X", "dev", "./lib/app.py"]


@pytest.mark.asyncio
async def test_reload_replaces_child_with_same_arguments(runner, spawner, console):
    first = runner.child

    await runner.serve(_script("r\n"))

    assert first.stopped is True
    assert runner.child is not first
    assert runner.child.args == first.args
    assert runner.child.cwd == first.cwd
    assert runner.state == SupervisorState.RUNNING
    assert console.clears == 1
    assert "Restart project..." in console.lines


@pytest.mark.asyncio
async def test_reload_during_restart_is_rejected(runner, spawner):
    await runner.handle("r")
    await runner.handle("R")
    await runner.settle()

    assert len(spawner.children) == 2
    assert runner.state == SupervisorState.RUNNING


@pytest.mark.asyncio
async def test_forced_quit_stops_child_and_exits_zero(runner):
    child = runner.child
    for command in ("qy", "qq"):
        with pytest.raises(SupervisorExit) as exc:
            await runner.serve(_script(command))
        assert exc.value.code == 0
    assert child.stopped is True
    assert runner.state == SupervisorState.IDLE


@pytest.mark.asyncio
async def test_quit_declined_keeps_child_running(runner, console):
    await runner.serve(_script("q\n", "n\n", "c\n"))

    assert "Do you want to quit the project? [y/n]" in console.lines
    assert runner.child.stopped is False
    assert runner.state == SupervisorState.RUNNING
    # the answer is consumed by the prompt, not dispatched as a command
    assert not any(line.startswith("Unknown input") for line in console.lines)
    assert console.clears == 1


@pytest.mark.asyncio
async def test_quit_confirmed_through_command_source(runner):
    child = runner.child
    with pytest.raises(SupervisorExit) as exc:
        await runner.serve(_script("q\n", "y\n"))

    assert exc.value.code == 0
    assert child.stopped is True


@pytest.mark.asyncio
async def test_quit_without_answer_does_not_exit(runner):
    await runner.serve(_script("q"))
    assert runner.child.stopped is False


class FlakySpawner(FakeSpawner):
    async def __call__(self, args, cwd):
        if self.children:
            raise FileNotFoundError("gone")
        return await super().__call__(args, cwd)


async def _then_block(*lines):
    for line in lines:
        yield line
    await asyncio.Event().wait()


@pytest.mark.asyncio
async def test_failed_reload_ends_loop_with_supervisor_error(console):
    runner = DevRunner("./lib/app.py", console=console, spawner=FlakySpawner())
    await runner.start()

    with pytest.raises(SupervisorError, match="gone"):
        await asyncio.wait_for(runner.serve(_then_block("r\n")), timeout=5)
    assert runner.state == SupervisorState.IDLE
    assert "Reload already in progress." not in console.lines


@pytest.mark.asyncio
async def test_reload_without_child_says_not_running(console, spawner):
    runner = DevRunner("./lib/app.py", console=console, spawner=spawner)

    assert runner.request_reload() is False
    assert console.lines == ["Project is not running."]
    assert spawner.children == []


@pytest.mark.asyncio
async def test_child_process_stop_terminates_running_child():
    child = await ChildProcess.spawn([sys.executable, "-c", "import time; time.sleep(30)"])
    assert child.running is True

    await asyncio.wait_for(child.stop(), timeout=10)

    assert child.running is False
    assert child.process.returncode is not None


@pytest.mark.asyncio
async def test_child_process_stop_after_exit_is_harmless():
    child = await ChildProcess.spawn([sys.executable, "-c", "pass"])
    assert await asyncio.wait_for(child.wait(), timeout=10) == 0

    await child.stop()

    assert child.process.returncode == 0


@pytest.mark.asyncio
async def test_unknown_input_prints_help_and_keeps_child(runner, console):
    child = runner.child
    await runner.serve(_script("zz\n"))

    assert runner.child is child
    assert child.stopped is False
    assert console.lines[-2:] == ["Unknown input: zz", HELP]


@pytest.mark.asyncio
async def test_clear_and_info(runner, console):
    await runner.serve(_script("c", "i"))
    assert console.clears == 1
    assert console.lines[0].startswith("WebApp version: v")
    assert console.lines[1].startswith("Python version: v")


@pytest.mark.asyncio
async def test_spawn_failure_raises_supervisor_error(console):
    async def broken(args, cwd):
        raise FileNotFoundError("no interpreter")

    runner = DevRunner("./lib/app.py", console=console, spawner=broken)
    with pytest.raises(SupervisorError):
        await runner.start()
    assert runner.state == SupervisorState.IDLE


def test_resolve_prefers_explicit_path(console):
    assert resolve_entry_point("custom/app.py", console) == "custom/app.py"
    assert console.lines == ["Running project from: custom/app.py"]


def test_resolve_probes_conventional_locations(tmp_path, monkeypatch, console):
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "server.py").write_text("")
    monkeypatch.chdir(tmp_path)

    assert resolve_entry_point("", console) == os.path.join("./src", "server.py")


def test_resolve_prompts_until_file_exists(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "entry.py").write_text("")
    console = FakeConsole(answers=["missing.py", "entry.py"])

    assert resolve_entry_point("", console) == "entry.py"
    assert len(console.questions) == 2
