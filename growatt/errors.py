from __future__ import annotations

from datetime import date
from typing import Any

CODE_PERMISSION_DENIED = 10011
CODE_PLANT_NOT_FOUND = 10012


class GrowattError(Exception):
    """Base class for all errors raised by the Growatt client."""


class APIError(GrowattError):
    """Error reported by the Growatt API in the response envelope."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message)
        self.code: int = code
        self.message: str = message

    def __str__(self) -> str:
        return f"growatt api error {self.code}: {self.message}"


class NoTokenError(GrowattError):
    def __str__(self) -> str:
        return "no API token provided"


class InvalidDateError(GrowattError, ValueError):
    pass


class EmptyResponseError(GrowattError):
    def __str__(self) -> str:
        return "empty response from API"


class RequestError(GrowattError):
    """The HTTP request could not be completed."""


class ResponseParseError(GrowattError):
    """The response body was not a valid API envelope."""


class RangeFetchError(GrowattError):
    """A day-by-day fetch stopped before reaching the end date.

    ``results`` holds the days fetched before the failure and the underlying
    error is available as ``__cause__``.
    """

    def __init__(self, message: str, day: date, results: list[Any]) -> None:
        super().__init__(message)
        self.date: date = day
        self.results: list[Any] = results


class FetchCancelledError(RangeFetchError):
    pass


def is_permission_denied(err: BaseException | None) -> bool:
    return isinstance(err, APIError) and err.code == CODE_PERMISSION_DENIED


def is_rate_limited(err: BaseException | None) -> bool:
    if not isinstance(err, APIError):
        return False
    return err.code == CODE_PLANT_NOT_FOUND and (
        err.message == "error_frequently_access" or "frequently" in err.message
    )


def is_plant_not_found(err: BaseException | None) -> bool:
    # The API reuses 10012 for rate limiting
    return (
        isinstance(err, APIError)
        and err.code == CODE_PLANT_NOT_FOUND
        and not is_rate_limited(err)
    )
