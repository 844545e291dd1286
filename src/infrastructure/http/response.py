"""Transport contract between tiles and file sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Callable


@dataclass(frozen=True)
class Response:
    """Result of one fetch: either payload bytes or an error message."""

    data: bytes = b''
    error: str | None = None
    status: int | None = None

    def __post_init__(self) -> None:
        if self.error and self.data:
            msg = 'Response carries both an error and a payload'
            raise ValueError(msg)

    @classmethod
    def failure(cls, error: str, status: int | None = None) -> Response:
        return cls(error=error, status=status)

    @property
    def has_error(self) -> bool:
        return bool(self.error)


class AsyncRequest(Protocol):
    """Handle to a request in flight."""

    def cancel(self) -> None: ...

    @property
    def is_completed(self) -> bool: ...


class FileSource(Protocol):
    """
    Something that fetches URLs asynchronously.

    request() returns at once. The callback runs exactly once per request,
    later and from whatever thread or loop the source uses, unless the request
    was cancelled before that point. It is never called from inside request().
    """

    def request(self, url: str, callback: Callable[[Response], None]) -> AsyncRequest: ...
