"""Worker launchers.

A launcher starts ``count`` independent tasks running the same target and
hands back one handle per task. Task ``i`` is called as
``target(RunContext(index=i, size=count), *args)`` and its return value is
the task's exit code.

The rest of the pipeline never depends on how tasks are created.
"""

import multiprocessing
import sys
import threading
from typing import Callable, Protocol, Sequence

from rgbblit.core.config import LauncherKind
from rgbblit.pipeline.channel import PointChannel
from rgbblit.pipeline.data import RunContext


class TaskHandle(Protocol):
    """Handle to one running worker."""

    index: int

    @property
    def exitcode(self) -> int | None: ...

    def is_alive(self) -> bool: ...

    def join(self, timeout: float | None = None) -> None: ...

    def terminate(self) -> None: ...


class Launcher(Protocol):
    def make_channel(self, maxsize: int) -> PointChannel: ...

    def spawn(self, target: Callable[..., int], args: Sequence, count: int) -> list[TaskHandle]: ...


def _process_entry(target, context, args):
    sys.exit(target(context, *args))


class ProcessHandle:
    def __init__(self, index: int, process: multiprocessing.process.BaseProcess):
        self.index = index
        self._process = process

    @property
    def exitcode(self) -> int | None:
        return self._process.exitcode

    def is_alive(self) -> bool:
        return self._process.is_alive()

    def join(self, timeout: float | None = None) -> None:
        self._process.join(timeout)

    def terminate(self) -> None:
        if self._process.is_alive():
            self._process.terminate()


class ProcessLauncher:
    """One OS process per worker."""

    def __init__(self, start_method: str = "spawn"):
        self.start_method = start_method
        self._ctx = multiprocessing.get_context(start_method)

    def make_channel(self, maxsize: int) -> PointChannel:
        return PointChannel.for_processes(maxsize, self.start_method)

    def spawn(self, target: Callable[..., int], args: Sequence, count: int) -> list[ProcessHandle]:
        handles = []
        for i in range(count):
            context = RunContext(index=i, size=count)
            process = self._ctx.Process(
                target=_process_entry,
                args=(target, context, tuple(args)),
                name=f"rgbblit-w{i}",
                daemon=True,
            )
            process.start()
            handles.append(ProcessHandle(i, process))
        return handles


class ThreadHandle:
    def __init__(self, index: int, target, context: RunContext, args: Sequence):
        self.index = index
        self._exitcode: int | None = None
        self._thread = threading.Thread(
            target=self._run,
            args=(target, context, tuple(args)),
            name=f"rgbblit-w{index}",
            daemon=True,
        )

    def _run(self, target, context, args):
        try:
            self._exitcode = target(context, *args)
        except BaseException:
            self._exitcode = 1
            raise

    def start(self):
        self._thread.start()

    @property
    def exitcode(self) -> int | None:
        if self._thread.is_alive() or self._thread.ident is None:
            return None
        return self._exitcode if self._exitcode is not None else 1

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def join(self, timeout: float | None = None) -> None:
        self._thread.join(timeout)

    def terminate(self) -> None:
        # Threads cannot be killed; daemon threads die with the process.
        pass


class ThreadLauncher:
    """Workers as threads of the current process."""

    def make_channel(self, maxsize: int) -> PointChannel:
        return PointChannel.for_threads(maxsize)

    def spawn(self, target: Callable[..., int], args: Sequence, count: int) -> list[ThreadHandle]:
        handles = []
        for i in range(count):
            handle = ThreadHandle(i, target, RunContext(index=i, size=count), args)
            handle.start()
            handles.append(handle)
        return handles


def make_launcher(kind: LauncherKind | str, start_method: str = "spawn") -> Launcher:
    """Select a launcher backend by name."""
    kind = LauncherKind(kind)
    if kind is LauncherKind.THREAD:
        return ThreadLauncher()
    return ProcessLauncher(start_method)
