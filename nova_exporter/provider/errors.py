"""OpenStack provider error taxonomy.

``OpenStackClient`` re-raises every HTTP or payload failure as one of these,
so producers and the team refresh job can log and count failures without
inspecting ``requests`` internals.

  ProviderRecoverableError  network errors, 5xx, 429 (next scrape may succeed)
    ProviderAuthError       Keystone rejected the credentials or token (401/403)
    ProviderTimeoutError    request exceeded the configured timeout (also 408/504)
  ProviderFatalError        unexpected 4xx, missing catalog service, malformed body
"""
from __future__ import annotations

import requests


class ProviderError(Exception):
    """Root of all OpenStack access failures."""


class ProviderRecoverableError(ProviderError):
    pass


class ProviderAuthError(ProviderRecoverableError):
    pass


class ProviderTimeoutError(ProviderRecoverableError):
    pass


class ProviderFatalError(ProviderError):
    pass


_STATUS_CLASSES: dict[int, type[ProviderError]] = {
    401: ProviderAuthError,
    403: ProviderAuthError,
    408: ProviderTimeoutError,
    504: ProviderTimeoutError,
    429: ProviderRecoverableError,
}


def classify_status(status_code: int) -> type[ProviderError]:
    if status_code in _STATUS_CLASSES:
        return _STATUS_CLASSES[status_code]
    if status_code >= 500:
        return ProviderRecoverableError
    return ProviderFatalError


def classify_provider_exception(exc: BaseException) -> type[ProviderError]:
    """Error class to raise for ``exc`` caught at the HTTP boundary.

    Already-classified errors keep their type; HTTP errors map by status
    code; other ``requests`` failures (DNS, refused connection, TLS) are
    recoverable; anything else (bad JSON, missing keys) is fatal.
    """
    if isinstance(exc, ProviderError):
        return type(exc)
    if isinstance(exc, requests.Timeout):
        return ProviderTimeoutError
    if isinstance(exc, requests.HTTPError) and exc.response is not None:
        return classify_status(exc.response.status_code)
    if isinstance(exc, requests.RequestException):
        return ProviderRecoverableError
    return ProviderFatalError


__all__ = [
    "ProviderError",
    "ProviderRecoverableError",
    "ProviderAuthError",
    "ProviderTimeoutError",
    "ProviderFatalError",
    "classify_status",
    "classify_provider_exception",
]
