# product_cache/models/result.py

"""Tagged success/failure values returned by the cache coordinator.

Expected outcomes such as "offline with nothing cached" are ordinary
values here, not exceptions, so callers branch on the result type.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class CacheErrorKind(Enum):
    """Why a coordinator request could not produce data."""

    INVALID_ARGUMENT = "invalid_argument"
    NO_CACHED_DATA = "no_cached_data"
    STORAGE_ERROR = "storage_error"
    NETWORK_ERROR = "network_error"


_USER_MESSAGES: dict[CacheErrorKind, str] = {
    CacheErrorKind.INVALID_ARGUMENT: "Invalid page request.",
    CacheErrorKind.NO_CACHED_DATA: (
        "You're offline and nothing is saved yet. "
        "Try again when you're back online."
    ),
    CacheErrorKind.STORAGE_ERROR: "Something went wrong. Please retry.",
    CacheErrorKind.NETWORK_ERROR: "Something went wrong. Please retry.",
}


@dataclass(frozen=True)
class CacheError:
    """Error payload carried by a :class:`Failure`."""

    kind: CacheErrorKind
    message: str = ""

    @property
    def user_message(self) -> str:
        """Copy suitable for showing to an end user."""
        return _USER_MESSAGES[self.kind]

    @property
    def retryable(self) -> bool:
        """Whether re-issuing the same request can succeed."""
        return self.kind is not CacheErrorKind.INVALID_ARGUMENT


@dataclass(frozen=True)
class Success(Generic[T]):
    """Successful outcome holding a value."""

    value: T

    @property
    def is_success(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """Failed outcome holding a :class:`CacheError`."""

    error: CacheError

    @property
    def is_success(self) -> bool:
        return False

    @property
    def kind(self) -> CacheErrorKind:
        return self.error.kind


Result = Success[T] | Failure
