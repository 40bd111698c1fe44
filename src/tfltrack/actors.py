"""Single-writer cache actors for lines, stations and routes."""

import copy
import logging
import queue
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Hashable, List, Optional, TypeVar

from .exceptions import TflError
from .models import Line, Route, Station
from .tfl_client import TflClient

logger = logging.getLogger(__name__)

V = TypeVar("V")

_STOP = object()


@dataclass
class _Request:
    message: Any
    reply: "queue.Queue[_Reply]"


@dataclass
class _Reply:
    value: Any = None
    error: Optional[BaseException] = None


class Actor:
    """
    A worker thread that owns some state and serves requests one at a time.

    Callers hand a request over through a bounded queue and wait on a
    private single-slot reply queue. If handing over and getting the reply
    takes longer than `timeout` seconds, the caller gives up on the worker
    and answers the request itself through `fallback`. The worker still
    finishes the abandoned request; its reply lands in the unread slot.
    """

    name = "actor"

    def __init__(self, timeout: float = 5.0, queue_size: int = 16):
        self.timeout = timeout
        self._requests: "queue.Queue[Any]" = queue.Queue(maxsize=queue_size)
        self._thread = threading.Thread(target=self._run, name=f"tfltrack-{self.name}", daemon=True)
        self._thread.start()

    def ask(self, message: Any) -> Any:
        """Send a message to the worker and return its answer."""
        reply: "queue.Queue[_Reply]" = queue.Queue(maxsize=1)
        deadline = time.monotonic() + self.timeout
        try:
            self._requests.put(_Request(message, reply), timeout=self.timeout)
            result = reply.get(timeout=max(0.0, deadline - time.monotonic()))
        except (queue.Full, queue.Empty):
            logger.warning(f"timeout waiting for remote request ({self.name} fetch)... processing one-off")
            return self.fallback(message)
        if result.error is not None:
            raise result.error
        return result.value

    def stop(self, timeout: Optional[float] = None) -> None:
        """Ask the worker to exit after the requests already queued."""
        try:
            self._requests.put(_STOP, timeout=timeout)
        except queue.Full:
            logger.warning(f"could not stop {self.name} worker, queue is full")
            return
        self._thread.join(timeout)

    @property
    def alive(self) -> bool:
        return self._thread.is_alive()

    def handle(self, message: Any) -> Any:
        """Serve one message on the worker thread."""
        raise NotImplementedError

    def fallback(self, message: Any) -> Any:
        """Serve one message on the caller thread without touching state."""
        raise NotImplementedError

    def _run(self) -> None:
        while True:
            request = self._requests.get()
            if request is _STOP:
                break
            try:
                result = _Reply(value=copy.deepcopy(self.handle(request.message)))
            except Exception as e:
                result = _Reply(error=e)
            # Never blocks: the slot is private and holds exactly one reply
            request.reply.put_nowait(result)
        logger.debug(f"{self.name} worker stopped")


class MemoizingActor(Actor, Generic[V]):
    """
    Remembers one fetched value per key for the life of the process.

    Failed fetches are logged and answered with an empty value; nothing is
    stored, so the next request for that key tries again.
    """

    def __init__(
        self,
        fetch: Callable[[Hashable], V],
        empty: Callable[[], V],
        timeout: float = 5.0,
        queue_size: int = 16,
    ):
        self._fetch = fetch
        self._empty = empty
        self._cache: Dict[Hashable, V] = {}
        super().__init__(timeout=timeout, queue_size=queue_size)

    def handle(self, key: Hashable) -> V:
        if key in self._cache:
            return self._cache[key]
        try:
            value = self._fetch(key)
        except TflError as e:
            logger.error(f"ERROR fetching {self.name} for {key}: {e}")
            return self._empty()
        self._cache[key] = value
        return value

    def fallback(self, key: Hashable) -> V:
        try:
            return self._fetch(key)
        except TflError as e:
            logger.error(f"ERROR fetching {self.name} for {key} during one-off: {e}")
            return self._empty()


class StationCache(MemoizingActor[List[Station]]):
    """Stations per line id."""

    name = "stations"

    def __init__(self, client: TflClient, timeout: float = 5.0, queue_size: int = 16):
        super().__init__(client.fetch_stations, list, timeout=timeout, queue_size=queue_size)

    def stations(self, line_id: str) -> List[Station]:
        return self.ask(line_id)


class RouteCache(MemoizingActor[List[Route]]):
    """Routes per line id."""

    name = "routes"

    def __init__(self, client: TflClient, timeout: float = 5.0, queue_size: int = 16):
        super().__init__(client.fetch_routes, list, timeout=timeout, queue_size=queue_size)

    def routes(self, line_id: str) -> List[Route]:
        return self.ask(line_id)


@dataclass(frozen=True)
class LineRequest:
    mode: str
    line_id: str = ""


class LineCache(Actor):
    """
    Lines per transport mode.

    Line status is never cached; it is fetched on every listing that asks
    for it. Looking up an id that the mode does not list yields a
    placeholder line named after the id.
    """

    name = "lines"

    def __init__(self, client: TflClient, timeout: float = 5.0, queue_size: int = 16):
        self._client = client
        self._lines_by_mode: Dict[str, List[Line]] = {}
        self._lines_by_id: Dict[str, Line] = {}
        super().__init__(timeout=timeout, queue_size=queue_size)

    def lines(self, mode: str, include_status: bool = False) -> List[Line]:
        lines = self.ask(LineRequest(mode=mode))
        if not lines or not include_status:
            return lines
        try:
            statuses = self._client.fetch_status(mode)
        except TflError as e:
            logger.error(f"error getting status: {e}")
            return lines
        for line in lines:
            line.status = statuses.get(line.id, [])
        return lines

    def line_details(self, mode: str, line_id: str) -> Line:
        if not line_id:
            logger.warning("line_details called without line_id")
            return Line(id="", name="")
        if not mode:
            logger.warning("line_details called without mode")
            return Line(id=line_id, name=line_id)
        lines = self.ask(LineRequest(mode=mode, line_id=line_id))
        if len(lines) != 1:
            return Line(id="", name="")
        return lines[0]

    def handle(self, request: LineRequest) -> List[Line]:
        lines = self._lines_by_mode.get(request.mode)
        if lines is None:
            try:
                lines = self._client.fetch_lines(request.mode)
            except TflError as e:
                logger.error(f"ERROR fetching lines: {e}")
                return []
            self._lines_by_mode[request.mode] = lines
            for line in lines:
                self._lines_by_id[line.id] = line
        return _respond(request, lines, self._lines_by_id)

    def fallback(self, request: LineRequest) -> List[Line]:
        try:
            lines = self._client.fetch_lines(request.mode)
        except TflError as e:
            logger.error(f"ERROR fetching lines during one-off: {e}")
            return []
        return _respond(request, lines, {line.id: line for line in lines})


def _respond(request: LineRequest, lines: List[Line], by_id: Dict[str, Line]) -> List[Line]:
    if not request.line_id:
        return lines
    line = by_id.get(request.line_id)
    if line is None:
        return [Line(id=request.line_id, name=request.line_id)]
    return [line]
