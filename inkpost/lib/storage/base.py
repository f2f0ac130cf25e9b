"""Object store protocol and common types."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol, TypeVar, runtime_checkable

from inkpost.lib.errors import ProviderError

T = TypeVar("T")


@dataclass
class UploadResult:
    """What the store reports back after an upload."""

    key: str
    url: str
    bytes: int | None = None
    width: int | None = None
    height: int | None = None
    format: str | None = None
    original_filename: str | None = None


@runtime_checkable
class ObjectStore(Protocol):
    """Interface for the remote image host.

    Implementations raise :class:`~inkpost.lib.errors.ProviderError` on
    transport or auth failures and
    :class:`~inkpost.lib.errors.ObjectNotFoundError` when destroying a key
    the store does not know.
    """

    provider: str

    async def upload(self, data: bytes, folder: str, filename: str | None = None) -> UploadResult:
        """Store ``data`` under a new key inside ``folder``."""
        ...

    async def destroy(self, key: str) -> None:
        """Remove the object stored under ``key``."""
        ...


async def run_blocking(
    func: Callable[..., T],
    *args: Any,
    timeout: float,
    operation: str,
    retryable: bool,
    **kwargs: Any,
) -> T:
    """Run a blocking SDK call in a worker thread, bounded by ``timeout``.

    A timeout becomes a :class:`ProviderError` flagged ``retryable``.
    """
    try:
        return await asyncio.wait_for(asyncio.to_thread(func, *args, **kwargs), timeout)
    except TimeoutError as exc:
        raise ProviderError(
            f"Object store {operation} timed out after {timeout:g}s", retryable=retryable
        ) from exc
