"""Loading/error tracking wrapper for remote fetches."""

import logging
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from .security import sanitize_error

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AsyncResource(Generic[T]):
    """
    Runs an async fetch and keeps ``data``, ``loading`` and ``error``.

    ``error`` only ever holds a sanitized message. In-flight fetches cannot
    be cancelled; a slow fetch finishing late still overwrites ``data``.
    """

    def __init__(
        self,
        fn: Callable[..., Awaitable[T]],
        params: Optional[dict[str, Any]] = None,
        skip: bool = False,
        debug: bool = False,
    ) -> None:
        self.fn = fn
        self.params = dict(params or {})
        self.skip = skip
        self.debug = debug
        self.data: Optional[T] = None
        self.loading = not skip
        self.error: Optional[str] = None

    async def load(self) -> None:
        """Run the initial fetch unless the resource was created with ``skip``."""
        if not self.skip:
            await self._fetch(self.params)

    async def refetch(self, params: Optional[dict[str, Any]] = None) -> None:
        """Fetch again, with new params if given."""
        if params is not None:
            self.params = dict(params)
        await self._fetch(self.params)

    async def _fetch(self, params: dict[str, Any]) -> None:
        self.loading = True
        self.error = None

        try:
            self.data = await self.fn(**params)
        except Exception as e:
            self.error = sanitize_error(e, debug=self.debug)
            if self.debug:
                logger.error(f"AsyncResource error details: {e!r}")
        finally:
            self.loading = False
