"""Dev runner — runs the project as a child process and reloads it on operator keystrokes.

Usage:
    runner = DevRunner(resolve_entry_point(path, console))
    await runner.start()
    await runner.serve(stdin_commands())

The supervisor itself never restarts: `r` replaces the child process, `q`
stops it and leaves. Commands come from an injected async source so the loop
can be driven by a scripted sequence instead of a terminal.
"""

import asyncio
import os
import platform
import sys
from enum import Enum
from typing import AsyncIterator, Awaitable, Callable, Iterable, Optional

import structlog

from webapp import __version__
from webapp.cli.console import Colors, Console, console as default_console

logger = structlog.get_logger()

DEFAULT_DIRS = ["./bin", "./lib", "./src"]
DEFAULT_APPS = ["app.py", "server.py", "main.py", "example.py", "run.py", "watcher.py"]

HELP = (
    "┌┬┬┬┬┬┬┬┬┬┬┬┬┬┬┬┬┬┬┬┬┬──────────┬┬┬┬┬┬┬┬┬┬┬┬┬┬┬┬┬┬┬┬┐\n"
    "││││││││││││││││││││││  WEBAPP  │││││││││││││││││││││\n"
    "├┴┴┴┴┴┴┴┴┴┴┴┴┴┴┴┴┴┴┴┴┴──────────┴┴┴┴┴┴┴┴┴┴┴┴┴┴┴┴┴┴┴┴┤\n"
    "│  * Press 'r' to Reload  the project               │\n"
    "├───────────────────────────────────────────────────┤\n"
    "│  * Press 'c' to clear screen                      │\n"
    "├───────────────────────────────────────────────────┤\n"
    "│  * Press 'i' to write info                        │\n"
    "├───────────────────────────────────────────────────┤\n"
    "│  * Press 'q' to quit the project                  │\n"
    "└───────────────────────────────────────────────────┘\n"
)


class SupervisorError(Exception):
    """The child process could not be started."""


class SupervisorExit(Exception):
    """Raised out of the command loop when the operator quits."""

    def __init__(self, code: int = 0):
        super().__init__(code)
        self.code = code


class SupervisorState(str, Enum):
    IDLE = "idle"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"


class ChildProcess:
    """Handle on one spawned child with inherited stdio."""

    def __init__(self, process: asyncio.subprocess.Process, args: list[str]):
        self.process = process
        self.args = args

    @property
    def pid(self) -> int:
        return self.process.pid

    @property
    def running(self) -> bool:
        return self.process.returncode is None

    @classmethod
    async def spawn(cls, args: list[str], cwd: Optional[str] = None) -> "ChildProcess":
        # No pipes: the child writes straight to the operator's terminal
        process = await asyncio.create_subprocess_exec(*args, cwd=cwd)
        return cls(process, args)

    async def stop(self) -> None:
        """Terminate and wait for exit, so no two children ever overlap."""
        if self.running:
            try:
                self.process.terminate()
            except ProcessLookupError:
                pass
        await self.process.wait()

    async def wait(self) -> int:
        return await self.process.wait()


Spawner = Callable[[list[str], Optional[str]], Awaitable[ChildProcess]]


def resolve_entry_point(
    path: str = "",
    console: Console = default_console,
    dirs: Iterable[str] = DEFAULT_DIRS,
    apps: Iterable[str] = DEFAULT_APPS,
) -> str:
    """Find the app file: explicit path, then conventional locations, then ask."""
    if path:
        console.write(f"Running project from: {path}")
        return path

    apps = list(apps)
    for directory in dirs:
        for app in apps:
            candidate = os.path.join(directory, app)
            if os.path.isfile(candidate):
                return candidate

    while True:
        path = console.read("Enter path of app file:", is_required=True)
        if os.path.isfile(path):
            return path
        console.write(f"File not found: {path}", Colors.ERROR)


async def stdin_commands() -> AsyncIterator[str]:
    """Yield operator input lines from stdin as they arrive."""
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader()
    await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), sys.stdin)
    while True:
        line = await reader.readline()
        if not line:
            return
        yield line.decode(errors="replace")


class DevRunner:
    """Owns the single child process slot and the operator command loop.

    Reload moves the slot RUNNING -> STOPPING -> STARTING -> RUNNING. A reload
    requested while the slot is not RUNNING is rejected, never queued twice.
    Operator answers (the quit confirmation) are read from the same command
    source as the commands themselves.
    """

    def __init__(
        self,
        path: str,
        console: Console = default_console,
        spawner: Optional[Spawner] = None,
    ):
        self.path = path
        self.console = console
        self.spawner = spawner or ChildProcess.spawn
        self.args = [sys.executable, "-X", "dev", path]
        # Run from the project root: the parent of the entry point's directory
        self.cwd = os.path.dirname(os.path.dirname(os.path.abspath(path)))
        self.child: Optional[ChildProcess] = None
        self.state = SupervisorState.IDLE
        self._reload_task: Optional[asyncio.Task] = None
        self._reload_failed = asyncio.Event()
        self._source: Optional[AsyncIterator[str]] = None

    async def start(self) -> ChildProcess:
        self.state = SupervisorState.STARTING
        try:
            self.child = await self.spawner(list(self.args), self.cwd)
        except OSError as e:
            self.state = SupervisorState.IDLE
            self.child = None
            logger.error("child_spawn_failed", path=self.path, error=str(e))
            raise SupervisorError(f"Cannot start {self.path}: {e}") from e
        self.state = SupervisorState.RUNNING
        logger.info("child_started", pid=self.child.pid, path=self.path)
        return self.child

    async def stop(self) -> None:
        if self.child is not None:
            self.state = SupervisorState.STOPPING
            await self.child.stop()
            logger.info("child_stopped", pid=self.child.pid)
        self.state = SupervisorState.IDLE

    def request_reload(self) -> bool:
        """Begin a reload in the background; False if one cannot start now."""
        if self.state != SupervisorState.RUNNING:
            logger.warning("reload_rejected", state=self.state.value)
            if self.state == SupervisorState.IDLE:
                self.console.write("Project is not running.", Colors.WARNING)
            else:
                self.console.write("Reload already in progress.", Colors.WARNING)
            return False
        self.state = SupervisorState.STOPPING
        self._reload_task = asyncio.create_task(self._reload())
        self._reload_task.add_done_callback(self._reload_finished)
        return True

    async def _reload(self) -> None:
        self.console.clear()
        self.console.write("Restart project...", Colors.WARNING)
        await self.stop()
        await self.start()

    def _reload_finished(self, task: asyncio.Task) -> None:
        if not task.cancelled() and task.exception() is not None:
            self._reload_failed.set()

    async def settle(self) -> None:
        """Wait for an in-flight reload to finish; re-raise its failure."""
        if self._reload_task is not None:
            task, self._reload_task = self._reload_task, None
            self._reload_failed.clear()
            await task

    async def _read(self) -> Optional[str]:
        try:
            return await self._source.__anext__()
        except StopAsyncIteration:
            return None

    async def next_line(self) -> Optional[str]:
        """Next operator line, or None once the source is exhausted.

        A reload failing in the background ends the wait with its
        SupervisorError instead of leaving it to the next keystroke.
        """
        if self._source is None:
            return None
        if self._reload_failed.is_set():
            await self.settle()

        reading = asyncio.create_task(self._read())
        failed = asyncio.create_task(self._reload_failed.wait())
        try:
            done, _ = await asyncio.wait({reading, failed}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            failed.cancel()

        if reading not in done:
            reading.cancel()
            await self.settle()
        return reading.result()

    async def quit(self, confirm: bool = True) -> None:
        if confirm:
            self.console.write("Do you want to quit the project? [y/n]", Colors.WARNING)
            answer = await self.next_line()
            if (answer or "").strip().lower() not in ("y", "yes"):
                return
        await self.settle()
        await self.stop()
        raise SupervisorExit(0)

    def banner(self) -> str:
        pid = self.child.pid if self.child is not None else "-"
        return f"Project is running ({pid})...\n\n{HELP}"

    def info(self) -> None:
        self.console.write(f"WebApp version: v{__version__}")
        self.console.write(f"Python version: v{platform.python_version()}")

    async def handle(self, line: str) -> None:
        command = line.strip().lower()

        if command == "r":
            self.request_reload()
        elif command in ("q", "qy", "qq"):
            await self.quit(confirm=command == "q")
        elif command == "c":
            self.console.clear()
        elif command == "i":
            self.info()
        else:
            self.console.write(f"Unknown input: {command}", Colors.ERROR)
            self.console.write(HELP, Colors.SUCCESS)

    async def serve(self, source: AsyncIterator[str]) -> None:
        """Dispatch commands until the source ends or the operator quits."""
        self._source = source.__aiter__()
        try:
            while True:
                line = await self.next_line()
                if line is None:
                    break
                await self.handle(line)
            await self.settle()
        finally:
            self._source = None

    async def wait(self) -> Optional[int]:
        """Block until the current child exits on its own."""
        await self.settle()
        if self.child is None:
            return None
        return await self.child.wait()
