"""Poll the godoc server until it answers HTTP requests.

A freshly launched godoc process gives no signal when it starts accepting
connections, and it needs a while to index ``GOROOT`` before it serves
``/pkg/``. :class:`ReadinessProbe` therefore issues short GET requests at a
fixed interval until one returns ``200 OK`` or a wall-clock deadline passes.
"""

from __future__ import annotations

import collections.abc as cabc
import logging
import time
from http import HTTPStatus

import requests

from godoc_snapshot._constants import (
    READINESS_DEADLINE_SECONDS,
    READINESS_INTERVAL_SECONDS,
    READINESS_REQUEST_TIMEOUT_SECONDS,
)
from godoc_snapshot.errors import SnapshotError

logger = logging.getLogger(__name__)


class ReadinessTimeoutError(SnapshotError):
    """Raised when the server does not answer before the deadline."""


class ReadinessProbe:
    """Repeated GET requests against a URL until it returns HTTP 200."""

    def __init__(
        self,
        *,
        deadline: float = READINESS_DEADLINE_SECONDS,
        interval: float = READINESS_INTERVAL_SECONDS,
        request_timeout: float = READINESS_REQUEST_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
        clock: cabc.Callable[[], float] = time.monotonic,
        sleep: cabc.Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialise the probe.

        Parameters
        ----------
        deadline : float, optional
            Seconds after the first attempt at which the probe gives up.
        interval : float, optional
            Pause between attempts, in seconds.
        request_timeout : float, optional
            Per-request client timeout, in seconds.
        session : requests.Session, optional
            Session used for the requests. Defaults to a new session.
        clock, sleep : callable, optional
            Monotonic clock and sleep function; tests substitute fakes.
        """
        self.deadline = deadline
        self.interval = interval
        self.request_timeout = request_timeout
        self._session = session or requests.Session()
        self._clock = clock
        self._sleep = sleep

    def check(self, url: str) -> bool:
        """Issue a single request and report whether it returned 200."""
        logger.info("checking server status: %s", url)
        try:
            response = self._session.get(url, timeout=self.request_timeout)
        except requests.RequestException as exc:
            logger.info("response: %s", exc)
            return False
        logger.info("response: %s %s", response.status_code, response.reason or "")
        return response.status_code == HTTPStatus.OK

    def wait_until_ready(self, url: str) -> None:
        """Block until ``url`` answers with HTTP 200.

        Raises
        ------
        ReadinessTimeoutError
            If ``deadline`` seconds pass without a successful response.
        """
        started = self._clock()
        while True:
            if self.check(url):
                return
            elapsed = self._clock() - started
            if elapsed >= self.deadline:
                msg = f"Timeout checking server: {url} not ready after {elapsed:.1f}s"
                raise ReadinessTimeoutError(msg)
            self._sleep(min(self.interval, self.deadline - elapsed))


__all__ = ["ReadinessProbe", "ReadinessTimeoutError"]
