"""
Resolve what3words identifiers to coordinates.

Lookups go through the in-memory LocationCache first; the what3words
convert-to-coordinates API is only called for identifiers never seen before.
Those calls are rate limited and billed, so a map set that reuses points
costs one lookup per distinct identifier, ever.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional

import requests

from config import USER_AGENT, W3W_CONVERT_URL, W3W_RATE_LIMIT, W3W_TIMEOUT
from src.errors import CredentialMissing, LookupFailure
from src.location_store import LocationCache
from src.utils.geo_utils import Coordinate, coordinate_problem
from src.utils.key_lock import KeyedLock
from src.utils.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


class What3WordsClient:
    """Thin client for the what3words convert-to-coordinates endpoint."""

    def __init__(
        self,
        api_key: str,
        session: Optional[requests.Session] = None,
        timeout: float = W3W_TIMEOUT,
        limiter: Optional[RateLimiter] = None,
    ):
        """
        Raises:
            CredentialMissing: If ``api_key`` is empty.
        """
        if not api_key:
            raise CredentialMissing(
                "initialize what3words client", "WHAT3WORDS_API_KEY", "add it to .env file"
            )
        self.api_key = api_key
        self.timeout = timeout
        self.limiter = limiter or RateLimiter(W3W_RATE_LIMIT, name="what3words")
        if session is None:
            session = requests.Session()
            session.headers.update({"User-Agent": USER_AGENT})
        self.session = session

    def convert_to_coordinates(self, words: str) -> Coordinate:
        """
        Convert a three-word address to coordinates.

        Raises:
            LookupFailure: On network errors, API errors (e.g. BadWords)
                or a response without coordinates.
        """
        self.limiter.wait()

        params = {"words": words, "key": self.api_key}
        try:
            response = self.session.get(W3W_CONVERT_URL, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise LookupFailure("convert what3words", words, str(e)) from e

        try:
            data = response.json()
        except ValueError as e:
            raise LookupFailure(
                "convert what3words", words, f"HTTP {response.status_code}, body is not JSON"
            ) from e

        # Errors come back as {"error": {"code": ..., "message": ...}} with a 4xx status.
        error = data.get("error") if isinstance(data, dict) else None
        if error:
            code = error.get("code", "unknown") if isinstance(error, dict) else error
            message = error.get("message", "") if isinstance(error, dict) else ""
            raise LookupFailure("convert what3words", words, f"{code} {message}".strip())

        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            raise LookupFailure("convert what3words", words, str(e)) from e

        return parse_convert_response(words, data)


def parse_convert_response(words: str, data: object) -> Coordinate:
    """
    Extract ``coordinates.lat`` / ``coordinates.lng`` from a convert response.

    Raises:
        LookupFailure: If the fields are missing, not numeric, not finite
            or out of range.
    """
    try:
        coords = data["coordinates"]  # type: ignore[index]
        lat, lng = coords["lat"], coords["lng"]
    except (KeyError, TypeError) as e:
        raise LookupFailure("convert what3words", words, "response has no coordinates") from e

    problem = coordinate_problem(lat, lng)
    if problem:
        raise LookupFailure("convert what3words", words, problem)
    return Coordinate(latitude=float(lat), longitude=float(lng))


class GeoResolver:
    """Cache-first geocode resolution."""

    def __init__(self, client: What3WordsClient, cache: Optional[LocationCache] = None):
        self.client = client
        self.cache = cache if cache is not None else LocationCache()
        self.lookups = 0
        self._in_flight = KeyedLock()
        self._count_lock = threading.Lock()

    def resolve(self, geocode: str) -> Coordinate:
        """
        Return coordinates for a geocode, calling the API only on a cache miss.

        Raises:
            LookupFailure: If the API can't convert the identifier.
        """
        cached = self.cache.get(geocode)
        if cached is not None:
            logger.debug(f"Cache hit for {geocode}")
            return cached

        with self._in_flight.hold(geocode):
            # Another worker may have resolved it while we waited.
            cached = self.cache.get(geocode)
            if cached is not None:
                return cached

            logger.info(f"Looking up missing location: {geocode}")
            coord = self.client.convert_to_coordinates(geocode)
            with self._count_lock:
                self.lookups += 1
            return self.cache.add(geocode, coord)

    def resolve_all(self, geocodes: Iterable[str], max_workers: int = 1) -> List[Coordinate]:
        """
        Resolve every distinct geocode, failing on the first error.

        With ``max_workers > 1`` lookups run in a thread pool. The call only
        returns or raises once every started lookup has finished, so the
        cache is stable when the caller persists it.

        Returns:
            Coordinates in first-seen order of the distinct geocodes.
        """
        distinct = list(dict.fromkeys(geocodes))
        if max_workers <= 1 or len(distinct) <= 1:
            return [self.resolve(g) for g in distinct]

        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="w3w") as pool:
            futures = [pool.submit(self.resolve, g) for g in distinct]
            try:
                return [f.result() for f in futures]
            except Exception:
                for f in futures:
                    f.cancel()
                raise
