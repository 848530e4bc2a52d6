"""
Atomic file writes.

Data goes to a temporary file beside the target and is renamed into place,
so readers only ever see the old file or the complete new one.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Union

# Read once; os.umask can only be queried by setting it.
_UMASK = os.umask(0)
os.umask(_UMASK)

DEFAULT_FILE_MODE = 0o666 & ~_UMASK


def atomic_write(path: Path, data: Union[bytes, str], suffix: str = ".tmp") -> None:
    """
    Write ``data`` to ``path`` via a temporary file and ``os.replace``.

    The result gets the same permissions a plain ``open(path, "w")`` would
    (0666 minus the umask), not mkstemp's owner-only 0600.

    Raises:
        OSError: On any disk error. The temporary file is removed and an
            existing ``path`` is left untouched.
    """
    path = Path(path)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=suffix)
    try:
        if isinstance(data, str):
            data = data.encode("utf-8")
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.chmod(tmp_name, DEFAULT_FILE_MODE)
        os.replace(tmp_name, path)
    except OSError:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
