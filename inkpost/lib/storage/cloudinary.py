"""Cloudinary-hosted object store."""

from __future__ import annotations

import io
from typing import TYPE_CHECKING, Any

import cloudinary.exceptions
import cloudinary.uploader

from inkpost.lib import observability
from inkpost.lib.errors import ObjectNotFoundError, ProviderError
from inkpost.lib.storage.base import UploadResult, run_blocking

if TYPE_CHECKING:
    from inkpost.config import CloudinaryConfig


class CloudinaryObjectStore:
    """Upload and destroy images on Cloudinary.

    Credentials are passed on every call rather than through
    ``cloudinary.config()`` so several stores can coexist in one process.
    """

    provider = "cloudinary"

    def __init__(self, config: CloudinaryConfig, timeout: float = 30.0) -> None:
        self._config = config
        self._timeout = timeout

    def _credentials(self) -> dict[str, Any]:
        if not (self._config.cloud_name and self._config.api_key and self._config.api_secret):
            raise ProviderError(
                "Cloudinary not configured: set media.cloudinary cloud_name, api_key and api_secret"
            )
        return {
            "cloud_name": self._config.cloud_name,
            "api_key": self._config.api_key,
            "api_secret": self._config.api_secret,
            "secure": True,
        }

    async def upload(self, data: bytes, folder: str, filename: str | None = None) -> UploadResult:
        options = {
            "folder": folder,
            "resource_type": "image",
            "overwrite": False,
            **self._credentials(),
        }
        if filename:
            options["filename"] = filename

        with observability.span("object_store.upload", provider=self.provider, folder=folder):
            try:
                response = await run_blocking(
                    cloudinary.uploader.upload,
                    io.BytesIO(data),
                    timeout=self._timeout,
                    operation="upload",
                    retryable=True,
                    **options,
                )
            except cloudinary.exceptions.Error as exc:
                raise ProviderError(f"Cloudinary upload failed: {exc}") from exc

        if not response or "public_id" not in response:
            raise ProviderError("Cloudinary upload failed: empty response")

        return UploadResult(
            key=response["public_id"],
            url=response.get("secure_url") or response["url"],
            bytes=response.get("bytes"),
            width=response.get("width"),
            height=response.get("height"),
            format=response.get("format"),
            original_filename=response.get("original_filename"),
        )

    async def destroy(self, key: str) -> None:
        with observability.span("object_store.destroy", provider=self.provider, key=key):
            try:
                response = await run_blocking(
                    cloudinary.uploader.destroy,
                    key,
                    timeout=self._timeout,
                    operation="destroy",
                    retryable=False,
                    resource_type="image",
                    **self._credentials(),
                )
            except cloudinary.exceptions.Error as exc:
                raise ProviderError(f"Cloudinary destroy failed for {key!r}: {exc}") from exc

        result = (response or {}).get("result")
        if result == "not found":
            raise ObjectNotFoundError(f"Cloudinary has no image {key!r}")
        if result != "ok":
            raise ProviderError(f"Cloudinary destroy failed for {key!r}: {result!r}")
