"""Readiness polling: block until a web page answers, then open it."""

import logging
import time
import webbrowser
from typing import Callable

import httpx

from .errors import ReadinessTimeout
from .models import PollTarget

logger = logging.getLogger(__name__)


def http_probe(url: str, timeout: float = 2.0) -> bool:
    """Single readiness check, equivalent to `curl --fail`.

    Redirects are not followed and count as success; any status of 400 or
    above, or any transport error, is a failure.

    Args:
        url: Page to request
        timeout: Seconds to wait for the response

    Returns:
        True if the page answered with a non-error status
    """
    try:
        response = httpx.get(url, timeout=timeout)
    except httpx.HTTPError as e:
        logger.debug(f"Probe of {url} failed: {e}")
        return False
    return not response.is_error


class ReadinessPoller:
    """Poll a URL at a fixed interval until it responds.

    Each probe is independent: no backoff, no jitter. Without max_wait the
    poll never gives up; the user stops it with Ctrl-C.

    Attributes:
        probe: Callable(url) -> bool performing one check
        interval: Seconds slept after a failed probe
        opener: Callable(url) invoked once the page is ready, or None
        sleep: Sleep function
        clock: Monotonic clock used for max_wait
    """

    def __init__(
        self,
        probe: Callable[[str], bool] | None = None,
        interval: float = 1.0,
        probe_timeout: float = 2.0,
        opener: Callable[[str], object] | None = webbrowser.open,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.probe = probe or (lambda url: http_probe(url, timeout=probe_timeout))
        self.interval = interval
        self.opener = opener
        self.sleep = sleep
        self.clock = clock

    def wait_until_ready(
        self,
        target: PollTarget,
        on_waiting: Callable[[str], None],
        on_ready: Callable[[str], None],
        on_retry: Callable[[], None] | None = None,
        max_wait: float | None = None,
    ) -> None:
        """Block until target.url answers, then open it.

        Args:
            target: URL plus the messages to report
            on_waiting: Called once with the waiting message before probing
            on_ready: Called once with the ready message after the first success
            on_retry: Called after every failed probe
            max_wait: Optional deadline in seconds

        Raises:
            ReadinessTimeout: If max_wait elapses before a probe succeeds
        """
        on_waiting(target.waiting_message)
        started = self.clock()
        attempts = 0

        while True:
            attempts += 1
            if self.probe(target.url):
                break
            if max_wait is not None and self.clock() - started >= max_wait:
                raise ReadinessTimeout(
                    f"{target.url} not ready after {attempts} attempts ({max_wait:g}s)"
                )
            self.sleep(self.interval)
            if on_retry is not None:
                on_retry()

        logger.info(f"{target.url} ready after {attempts} attempt(s)")
        on_ready(target.ready_message)
        if self.opener is not None:
            self.opener(target.url)
