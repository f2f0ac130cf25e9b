"""Local filesystem object store."""

from __future__ import annotations

import asyncio
import glob
import secrets
from pathlib import Path

from slugify import slugify

from inkpost.lib import observability
from inkpost.lib.errors import ObjectNotFoundError, ProviderError
from inkpost.lib.imaging import probe_image
from inkpost.lib.media_url import UPLOAD_MARKER
from inkpost.lib.storage.base import UploadResult


class LocalObjectStore:
    """Store images on disk and serve them below ``{public_base_url}/upload/``.

    Keys look like ``folder/name-token``; the file on disk carries the
    image's extension, which the key does not.
    """

    provider = "local"

    def __init__(self, base_path: Path, public_base_url: str) -> None:
        self._base_path = base_path
        self._public_base_url = public_base_url.rstrip("/")

    @property
    def base_path(self) -> Path:
        return self._base_path

    async def upload(self, data: bytes, folder: str, filename: str | None = None) -> UploadResult:
        info = probe_image(data)
        if info is None:
            raise ProviderError("Local store accepts image data only")

        stem = slugify(Path(filename).stem) if filename else ""
        name = f"{stem or 'image'}-{secrets.token_hex(6)}"
        key = f"{folder.strip('/')}/{name}" if folder.strip("/") else name
        path = self._base_path / f"{key}.{info.extension}"

        with observability.span("object_store.upload", provider=self.provider, folder=folder):
            try:
                await asyncio.to_thread(self._write_file, path, data)
            except OSError as exc:
                raise ProviderError(f"Local upload failed: {exc}", retryable=True) from exc

        return UploadResult(
            key=key,
            url=f"{self._public_base_url}{UPLOAD_MARKER}{key}.{info.extension}",
            bytes=len(data),
            width=info.width,
            height=info.height,
            format=info.format,
            original_filename=filename,
        )

    async def destroy(self, key: str) -> None:
        with observability.span("object_store.destroy", provider=self.provider, key=key):
            removed = await asyncio.to_thread(self._remove, key)
        if not removed:
            raise ObjectNotFoundError(f"No stored file for key {key!r}")

    # -- internal helpers --

    def _remove(self, key: str) -> bool:
        target = self._base_path / key
        if not target.resolve().is_relative_to(self._base_path.resolve()):
            return False
        removed = False
        for path in target.parent.glob(f"{glob.escape(target.name)}.*"):
            path.unlink(missing_ok=True)
            removed = True
        return removed

    @staticmethod
    def _write_file(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
