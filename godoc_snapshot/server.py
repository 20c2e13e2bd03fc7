"""Supervise the transient godoc server that the snapshot is mirrored from.

The server runs for the duration of a :meth:`GodocServer.running` block.
Entering the block clears out any stray ``godoc`` process, launches a new one
bound to the configured ``host:port``, and hands a supervisor thread the two
one-shot signals that coordinate shutdown. Leaving the block, whether the
body finished or raised, requests shutdown and waits until the supervisor
confirms the process has been killed and reaped, so the server never
outlives the pipeline.

Example
-------
>>> from godoc_snapshot.server import GodocServer
>>> server = GodocServer("localhost:6161")
>>> with server.running() as handle:  # doctest: +SKIP
...     handle.state
<ServerState.STARTING: 'starting'>
"""

from __future__ import annotations

import collections.abc as cabc
import contextlib
import dataclasses as dc
import enum
import logging
import subprocess
import threading
import typing as typ

from godoc_snapshot.errors import SnapshotError

logger = logging.getLogger(__name__)

PopenFactory = cabc.Callable[..., subprocess.Popen[typ.Any]]
Runner = cabc.Callable[..., subprocess.CompletedProcess[typ.Any]]


class StartupError(SnapshotError):
    """Raised when the godoc server process cannot be launched."""


class TerminationError(SnapshotError):
    """Raised when the godoc server process cannot be stopped."""


class ServerState(enum.Enum):
    """Lifecycle states of the documentation server process."""

    STARTING = "starting"
    READY = "ready"
    SHUTTING_DOWN = "shutting_down"
    TERMINATED = "terminated"


@dc.dataclass(slots=True)
class ServerHandle:
    """The running godoc process and where it listens."""

    process: subprocess.Popen[typ.Any]
    host: str
    state: ServerState = ServerState.STARTING

    @property
    def pid(self) -> int:
        return self.process.pid

    def mark_ready(self) -> None:
        """Record that the server answered a readiness probe."""
        if self.state is ServerState.STARTING:
            self.state = ServerState.READY


@dc.dataclass(slots=True)
class ShutdownSignals:
    """One-shot events shared between the pipeline and the supervisor.

    ``requested`` is set once by the pipeline when it is done with the
    server; ``complete`` is set once by the supervisor after the process is
    gone. ``error`` carries a termination failure back to the pipeline.
    """

    requested: threading.Event = dc.field(default_factory=threading.Event)
    complete: threading.Event = dc.field(default_factory=threading.Event)
    error: TerminationError | None = None


class GodocServer:
    """Start, supervise, and stop a ``godoc -http`` process."""

    def __init__(
        self,
        host: str,
        *,
        executable: str = "godoc",
        popen: PopenFactory = subprocess.Popen,
        runner: Runner = subprocess.run,
        kill_timeout: float = 10.0,
    ) -> None:
        self.host = host
        self.executable = executable
        self._popen = popen
        self._runner = runner
        self.kill_timeout = kill_timeout

    @property
    def command(self) -> list[str]:
        return [self.executable, f"-http={self.host}"]

    def kill_existing(self) -> None:
        """Best-effort ``killall`` of leftover servers with the same name.

        A server left over from an earlier run would hold the port. Failing
        to kill it is harmless: the new process then fails to bind and the
        readiness probe reports the problem.
        """
        try:
            completed = self._runner(
                ["killall", self.executable],
                check=False,
                capture_output=True,
                text=True,
                errors="replace",
            )
        except OSError as exc:
            logger.debug("could not run killall %s: %s", self.executable, exc)
            return
        if completed.returncode != 0:
            logger.debug("no running %s process was killed.", self.executable)

    def start(self) -> ServerHandle:
        """Launch the server and return its handle in the ``STARTING`` state."""
        logger.info("starting up godoc server at %s.", self.host)
        try:
            process = self._popen(self.command)
        except OSError as exc:
            msg = f"Error starting godoc server with {' '.join(self.command)!r}: {exc}"
            raise StartupError(msg) from exc
        logger.debug("godoc server running with pid %s.", process.pid)
        return ServerHandle(process=process, host=self.host)

    def terminate(self, handle: ServerHandle) -> None:
        """Kill the server and block until the process has been reaped."""
        if handle.state is ServerState.TERMINATED:
            return
        handle.state = ServerState.SHUTTING_DOWN
        logger.info("shutting down godoc server.")
        process = handle.process
        try:
            if process.poll() is None:
                process.kill()
            process.wait(timeout=self.kill_timeout)
        except subprocess.TimeoutExpired as exc:
            msg = (
                f"godoc server (pid {process.pid}) did not exit within "
                f"{self.kill_timeout:g}s of being killed"
            )
            raise TerminationError(msg) from exc
        except OSError as exc:
            msg = f"Error killing godoc server process (pid {process.pid}): {exc}"
            raise TerminationError(msg) from exc
        handle.state = ServerState.TERMINATED
        logger.info("godoc server shut down.")

    def supervise(self, handle: ServerHandle, signals: ShutdownSignals) -> None:
        """Keep the server alive until shutdown is requested, then stop it."""
        try:
            signals.requested.wait()
            self.terminate(handle)
        except TerminationError as exc:
            signals.error = exc
        finally:
            signals.complete.set()

    @contextlib.contextmanager
    def running(self) -> cabc.Iterator[ServerHandle]:
        """Run the server for the duration of the ``with`` block.

        Raises
        ------
        StartupError
            If the process cannot be launched; nothing needs cleaning up.
        TerminationError
            If the process could not be stopped. When the block itself raised,
            this error is chained onto that exception.
        """
        self.kill_existing()
        handle = self.start()
        signals = ShutdownSignals()
        supervisor = threading.Thread(
            target=self.supervise,
            args=(handle, signals),
            name="godoc-supervisor",
            daemon=True,
        )
        supervisor.start()
        try:
            yield handle
        finally:
            signals.requested.set()
            signals.complete.wait()
            supervisor.join()
            if signals.error is not None:
                raise signals.error


__all__ = [
    "GodocServer",
    "ServerHandle",
    "ServerState",
    "ShutdownSignals",
    "StartupError",
    "TerminationError",
]
