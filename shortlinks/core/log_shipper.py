"""Remote log shipping for URL Shortener Service.

Structured log events are posted to a collector at ``<base_url>/api/logs``.
Each event gets its own bounded delivery sequence: up to ``max_attempts``
requests, each limited by ``timeout`` seconds, with a linearly growing pause
(``retry_delay * attempt``) between attempts. Events that still fail are
dropped and reported to the local logger only.

Callers use :meth:`LogShipper.log` (or the level helpers), which schedules
delivery as a background task and returns immediately. Calls made from worker
threads are handed over to the loop the shipper was bound to (explicitly via
:meth:`LogShipper.bind_loop`, or the first loop it logged from).
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Union

import httpx
from fastapi import Request

from ..models.log import LogEvent, LogLevel

logger = logging.getLogger(__name__)

LOGS_PATH = "/api/logs"


class LogShipper:
    """Asynchronous, retrying client for the remote log collector."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        max_attempts: int = 3,
        retry_delay: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize the shipper.

        Args:
            base_url: Collector base URL; events go to ``base_url + /api/logs``.
            timeout: Per-attempt request timeout in seconds.
            max_attempts: Total delivery attempts per event.
            retry_delay: Base delay in seconds; attempt N waits ``retry_delay * N``.
            transport: Optional httpx transport, mainly for tests.
            sleep: Coroutine used to wait between attempts.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self._transport = transport
        self._sleep = sleep
        self._client: Optional[httpx.AsyncClient] = None
        self._pending: set[asyncio.Task] = set()
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}{LOGS_PATH}"

    @property
    def pending(self) -> int:
        """Number of deliveries still in flight."""
        return len(self._pending)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                transport=self._transport,
                headers={"Content-Type": "application/json"},
            )
        return self._client

    async def send(self, event: LogEvent) -> bool:
        """Deliver one event, retrying with linear backoff.

        Args:
            event: The event to deliver.

        Returns:
            True if the collector accepted the event, False if it was dropped.
        """
        payload = event.model_dump(mode="json")
        client = self._get_client()

        for attempt in range(1, self.max_attempts + 1):
            try:
                # httpx timeouts are per phase; wait_for bounds the whole attempt
                response = await asyncio.wait_for(
                    client.post(self.endpoint, json=payload, timeout=self.timeout),
                    self.timeout,
                )
                response.raise_for_status()
                return True
            except (httpx.HTTPError, asyncio.TimeoutError) as e:
                logger.warning(f"Log attempt {attempt} failed: {e!r}")
                if attempt < self.max_attempts:
                    await self._sleep(self.retry_delay * attempt)

        logger.error(f"Failed to send log after all retry attempts: {payload}")
        return False

    def log(
        self,
        stack: str,
        level: Union[LogLevel, str],
        package: str,
        message: str,
    ) -> Optional[asyncio.Task]:
        """Ship an event in the background.

        Args:
            stack: Originating stack, e.g. ``"backend"``.
            level: One of the :class:`LogLevel` values.
            package: Originating package, e.g. ``"handler"``.
            message: Human-readable message.

        Returns:
            The delivery task. None when called from outside the event loop:
            the event is then handed to the bound loop if it is running, or
            reported locally otherwise.
        """
        event = LogEvent(
            stack=stack, level=LogLevel(level), package=package, message=message
        )
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = self._loop
            if loop is not None and loop.is_running() and not loop.is_closed():
                loop.call_soon_threadsafe(self._dispatch, event)
            else:
                logger.warning(
                    f"No running event loop, log event not shipped: "
                    f"[{event.level.value}] {event.package}: {event.message}"
                )
            return None

        if self._loop is None:
            self._loop = loop
        return self._dispatch(event)

    def bind_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        """Set the loop that events logged from worker threads are sent on."""
        self._loop = loop

    def _dispatch(self, event: LogEvent) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(self.send(event))
        self._pending.add(task)
        task.add_done_callback(self._on_delivery_done)
        return task

    def _on_delivery_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Log delivery crashed: {exc!r}")

    def debug(self, stack: str, package: str, message: str) -> Optional[asyncio.Task]:
        return self.log(stack, LogLevel.DEBUG, package, message)

    def info(self, stack: str, package: str, message: str) -> Optional[asyncio.Task]:
        return self.log(stack, LogLevel.INFO, package, message)

    def warn(self, stack: str, package: str, message: str) -> Optional[asyncio.Task]:
        return self.log(stack, LogLevel.WARN, package, message)

    def error(self, stack: str, package: str, message: str) -> Optional[asyncio.Task]:
        return self.log(stack, LogLevel.ERROR, package, message)

    def fatal(self, stack: str, package: str, message: str) -> Optional[asyncio.Task]:
        return self.log(stack, LogLevel.FATAL, package, message)

    async def drain(self) -> None:
        """Wait for all in-flight deliveries to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def aclose(self) -> None:
        """Drain outstanding deliveries and close the HTTP client."""
        await self.drain()
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def get_log_shipper(request: Request) -> LogShipper:
    """Get the application's log shipper for dependency injection."""
    return request.app.state.log_shipper
