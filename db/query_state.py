# db/query_state.py
"""
Loading/error/data bookkeeping shared by every view.

A QueryRunner wraps one async fetch function. Each run is stamped with a
monotonically increasing token; when a run finishes after a newer one has
started, its result is thrown away instead of overwriting newer state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from db.database import describe_error
from db.models import Page

logger = logging.getLogger(__name__)

T = TypeVar("T")


class QueryStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass
class QueryResult(Generic[T]):
    data: T
    status: QueryStatus = QueryStatus.IDLE
    error: Optional[str] = None

    @property
    def loading(self) -> bool:
        return self.status == QueryStatus.LOADING


class QueryRunner(Generic[T]):
    def __init__(
        self,
        fetch: Callable[..., Awaitable[T]],
        empty: Callable[[], T],
        keep_data_on_error: bool = False,
        name: Optional[str] = None,
    ):
        self._fetch = fetch
        self._empty = empty
        self._keep_data_on_error = keep_data_on_error
        self.name = name or getattr(fetch, "__name__", "query")
        self._token = 0
        self._last_call: Optional[tuple] = None
        self._stale = False
        self.result: QueryResult[T] = QueryResult(data=empty())

    @property
    def token(self) -> int:
        return self._token

    def invalidate(self) -> None:
        """Make the next ensure() fetch again even with unchanged arguments."""
        self._stale = True

    def _settled(self) -> bool:
        return not self._stale and self.result.status != QueryStatus.IDLE

    def is_current(self, *args: Any, **kwargs: Any) -> bool:
        """True when ensure() with these arguments would not touch the network."""
        return self._settled() and self._last_call == (args, kwargs)

    async def ensure(self, client: Any, *args: Any, **kwargs: Any) -> QueryResult[T]:
        """Run only if never run before, invalidated, or the arguments changed."""
        if self.is_current(*args, **kwargs):
            return self.result
        return await self.run(client, *args, **kwargs)

    async def refetch(self, client: Any) -> QueryResult[T]:
        args, kwargs = self._last_call or ((), {})
        return await self.run(client, *args, **kwargs)

    async def run(self, client: Any, *args: Any, **kwargs: Any) -> QueryResult[T]:
        self._token += 1
        token = self._token
        self._last_call = (args, kwargs)
        self._stale = False
        self.result = replace(self.result, status=QueryStatus.LOADING, error=None)

        try:
            data = await self._fetch(client, *args, **kwargs)
        except Exception as e:
            if token != self._token:
                logger.debug("Discarding stale %s failure (token %d)", self.name, token)
                return self.result
            logger.exception("%s failed", self.name)
            data = self.result.data if self._keep_data_on_error else self._empty()
            self.result = QueryResult(data=data, status=QueryStatus.FAILURE, error=describe_error(e))
            return self.result

        if token != self._token:
            logger.debug("Discarding stale %s result (token %d)", self.name, token)
            return self.result

        self.result = QueryResult(data=data, status=QueryStatus.SUCCESS)
        return self.result


@dataclass
class PageRequest:
    filters: Any = None
    page: int = 1
    limit: int = 10


class PagedQuery(QueryRunner[Page]):
    """
    QueryRunner for the list views.

    `ensure` only hits the network when filters, page or limit differ from
    the last request or the runner was invalidated; `refetch` always does.
    """

    def __init__(
        self,
        fetch: Callable[..., Awaitable[Page]],
        empty: Callable[[], Page] = Page,
        name: Optional[str] = None,
    ):
        super().__init__(fetch, empty, name=name)
        self.request: Optional[PageRequest] = None

    def is_current(self, filters: Any = None, page: int = 1, limit: int = 10) -> bool:
        return self._settled() and self.request == PageRequest(filters=filters, page=page, limit=limit)

    async def ensure(self, client: Any, filters: Any = None, page: int = 1, limit: int = 10) -> QueryResult[Page]:
        if self.is_current(filters, page, limit):
            return self.result
        return await self._load(client, PageRequest(filters=filters, page=page, limit=limit))

    async def refetch(self, client: Any, page: Optional[int] = None, limit: Optional[int] = None) -> QueryResult[Page]:
        current = self.request or PageRequest()
        wanted = replace(
            current,
            page=current.page if page is None else page,
            limit=current.limit if limit is None else limit,
        )
        return await self._load(client, wanted)

    async def _load(self, client: Any, request: PageRequest) -> QueryResult[Page]:
        self.request = request
        if request.filters is None:
            return await self.run(client, page=request.page, limit=request.limit)
        return await self.run(client, request.filters, page=request.page, limit=request.limit)
