"""
Content-addressed download cache.

Each remote resource is stored once under a name derived from a logical id
and a hash of its URL. A file that exists is trusted forever: there is no
expiry and no refresh. Changing any URL parameter produces a new entry.
"""

from __future__ import annotations

import base64
import hashlib
import logging
from pathlib import Path
from typing import Optional

import requests

from config import STATIC_MAPS_RATE_LIMIT, STATIC_MAPS_TIMEOUT, USER_AGENT
from src.errors import DownloadFailure, WriteFailure
from src.utils.files import atomic_write
from src.utils.key_lock import KeyedLock
from src.utils.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

KEY_LENGTH = 16


def make_key(uri: str) -> str:
    """Short, filesystem-safe digest of a URL."""
    digest = hashlib.sha256(uri.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii")[:KEY_LENGTH]


class ContentAddressedCache:
    """Downloads a URL to ``{logical_id}-{hash}.{ext}`` unless already present."""

    def __init__(
        self,
        directory: Path,
        ext: str = "png",
        session: Optional[requests.Session] = None,
        timeout: float = STATIC_MAPS_TIMEOUT,
        limiter: Optional[RateLimiter] = None,
        content_type_prefix: Optional[str] = "image/",
    ):
        """
        Args:
            directory: Cache directory. Must already exist.
            ext: File extension for entries.
            session: HTTP session, replaceable in tests.
            timeout: Per-request timeout in seconds.
            limiter: Spacing between downloads.
            content_type_prefix: Reject responses whose Content-Type doesn't
                start with this. ``None`` accepts anything.
        """
        self.directory = Path(directory)
        self.ext = ext
        self.timeout = timeout
        self.limiter = limiter or RateLimiter(STATIC_MAPS_RATE_LIMIT, name="download")
        self.content_type_prefix = content_type_prefix
        if session is None:
            session = requests.Session()
            session.headers.update({"User-Agent": USER_AGENT})
        self.session = session
        self._writers = KeyedLock()

    def entry_path(self, logical_id: str, uri: str) -> Path:
        return self.directory / f"{logical_id}-{make_key(uri)}.{self.ext}"

    def has(self, logical_id: str, uri: str) -> bool:
        return self.entry_path(logical_id, uri).exists()

    def fetch_or_get(self, logical_id: str, uri: str) -> Path:
        """
        Return the cached file for a URL, downloading it on first use.

        Raises:
            DownloadFailure: If the request fails or returns a non-image body.
            WriteFailure: If the file can't be written to the cache directory.
        """
        path = self.entry_path(logical_id, uri)
        if path.exists():
            logger.debug(f"Cache hit for {logical_id}: {path.name}")
            return path

        with self._writers.hold(path.name):
            if path.exists():
                return path
            body = self._download(logical_id, uri)
            self._write(path, body)

        logger.info(f"Downloaded {logical_id} ({len(body)} bytes) to {path}")
        return path

    def _download(self, logical_id: str, uri: str) -> bytes:
        self.limiter.wait()
        try:
            response = self.session.get(uri, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise DownloadFailure("download", logical_id, str(e)) from e

        ctype = response.headers.get("Content-Type", "")
        if self.content_type_prefix and not ctype.startswith(self.content_type_prefix):
            raise DownloadFailure("download", logical_id, f"unexpected Content-Type '{ctype}'")
        return response.content

    def _write(self, path: Path, body: bytes) -> None:
        try:
            atomic_write(path, body, suffix=".part")
        except OSError as e:
            raise WriteFailure("write cache entry", str(path), str(e)) from e

    @property
    def size(self) -> int:
        """Number of cache entries."""
        return len(list(self.directory.glob(f"*.{self.ext}")))
