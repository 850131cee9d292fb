from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass

from ..adapters.weather.base import TransportError, WeatherLookupError, WeatherTransport
from ..domain.models import LookupRequest

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4

UrlBuilder = Callable[[LookupRequest], str]


@dataclass(frozen=True, slots=True)
class InFlightFetch:
    token: int
    request: LookupRequest | None
    future: Future[bytes]


class FetchExecutor:
    """Issues weather requests on a worker pool and tracks the current token.

    Every call to :meth:`fetch` mints a new token and makes it current. The
    underlying transport call is never cancelled; callers compare the token
    of a completed fetch with :meth:`is_current` to discard superseded results.
    """

    def __init__(
        self,
        *,
        transport: WeatherTransport,
        build_url: UrlBuilder,
        workers: Executor | None = None,
    ) -> None:
        self._transport = transport
        self._build_url = build_url
        self._owns_workers = workers is None
        self._workers = workers or ThreadPoolExecutor(
            max_workers=DEFAULT_MAX_WORKERS,
            thread_name_prefix="clima-fetch",
        )
        self._tokens = itertools.count(1)
        self._lock = threading.Lock()
        self._current_token = 0

    @property
    def current_token(self) -> int:
        with self._lock:
            return self._current_token

    def is_current(self, token: int) -> bool:
        with self._lock:
            return token == self._current_token

    def fetch(self, request: LookupRequest) -> InFlightFetch:
        token = self._mint()
        try:
            url = self._build_url(request)
        except WeatherLookupError as exc:
            LOGGER.warning("Lookup %s for %s could not be built: %s", token, request.describe(), exc)
            return InFlightFetch(token=token, request=request, future=_failed_future(exc))

        LOGGER.info("Lookup %s issued for %s", token, request.describe())
        future = self._workers.submit(self._call_transport, url)
        return InFlightFetch(token=token, request=request, future=future)

    def reject(self, error: WeatherLookupError) -> InFlightFetch:
        """Supersede earlier lookups with one that has already failed."""
        token = self._mint()
        LOGGER.warning("Lookup %s rejected: %s", token, error)
        return InFlightFetch(token=token, request=None, future=_failed_future(error))

    def _mint(self) -> int:
        with self._lock:
            token = next(self._tokens)
            self._current_token = token
        return token

    def _call_transport(self, url: str) -> bytes:
        try:
            return self._transport.get(url)
        except TransportError:
            raise
        except Exception as exc:
            LOGGER.exception("Weather transport failed unexpectedly")
            raise TransportError("Weather transport failed unexpectedly") from exc

    def shutdown(self, *, wait: bool = True) -> None:
        if self._owns_workers:
            self._workers.shutdown(wait=wait)


def _failed_future(error: WeatherLookupError) -> Future[bytes]:
    future: Future[bytes] = Future()
    future.set_exception(error)
    return future
