"""Service-layer error taxonomy.

Services raise these; the HTTP layer maps each kind to a status code in
:mod:`inkpost.lib.exceptions`.
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for failures surfaced to the caller."""

    kind = "error"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    kind = "not_found"
    status_code = 404


class ForbiddenError(ServiceError):
    kind = "forbidden"
    status_code = 403


class BadRequestError(ServiceError):
    kind = "bad_request"
    status_code = 400


class ConflictError(ServiceError):
    kind = "conflict"
    status_code = 409


class ProviderError(ServiceError):
    """The remote object store failed.

    ``retryable`` is True when repeating the call is safe (e.g. an upload
    that timed out before anything was recorded).
    """

    kind = "provider_error"
    status_code = 502

    def __init__(self, message: str, *, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable


class ObjectNotFoundError(ProviderError):
    """The store has no object under the requested key."""
