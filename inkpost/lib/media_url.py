"""Map a public media URL back to its object store key."""

from __future__ import annotations

import re
from urllib.parse import unquote, urlsplit

UPLOAD_MARKER = "/upload/"

_VERSION_SEGMENT = re.compile(r"^v\d+$")


def extract_storage_key(url: str | None) -> str | None:
    """Return the store key embedded in ``url``, or None if it has none.

    Everything after the ``/upload/`` path marker is the key, optionally
    preceded by transformation segments and a ``v<digits>`` version; the
    file extension is stripped::

        https://res.cloudinary.com/demo/image/upload/v12345/a/b/c.png -> "a/b/c"
    """
    if not url:
        return None

    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return None
    if not parts.scheme or not parts.netloc:
        return None

    idx = parts.path.find(UPLOAD_MARKER)
    if idx == -1:
        return None

    segments = [s for s in parts.path[idx + len(UPLOAD_MARKER):].split("/") if s]

    version_idx = next(
        (i for i, s in enumerate(segments) if _VERSION_SEGMENT.match(s)), None
    )
    if version_idx is not None:
        segments = segments[version_idx + 1:]
    if not segments:
        return None

    segments = [unquote(s) for s in segments]
    stem, dot, _ext = segments[-1].rpartition(".")
    if dot and stem:
        segments[-1] = stem

    return "/".join(segments)
