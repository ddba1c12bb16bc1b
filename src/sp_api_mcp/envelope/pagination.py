"""Follow continuation tokens until a paginated operation is exhausted."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from sp_api_mcp.envelope.decoder import Envelope

PayloadT = TypeVar("PayloadT")
ItemT = TypeVar("ItemT")


@dataclass
class PaginationState(Generic[ItemT]):
    accumulated: list[ItemT] = field(default_factory=list)
    next_token: str | None = None
    round_trips: int = 0

    def advance(self, items: Sequence[ItemT], next_token: str | None) -> None:
        self.accumulated.extend(items)
        token = (next_token or "").strip()
        self.next_token = token or None
        self.round_trips += 1


async def walk_pages(
    fetch_page: Callable[[str | None], Awaitable[Envelope[PayloadT]]],
    select_items: Callable[[PayloadT], Sequence[ItemT]],
) -> PaginationState[ItemT]:
    """Fetch pages one after another and concatenate their items.

    The first call receives ``None``; each later call receives the previous
    page's token. ``fetch_page`` is expected to raise on any decode or
    upstream failure, which aborts the walk with no partial result.
    """
    state: PaginationState[ItemT] = PaginationState()
    while True:
        envelope = await fetch_page(state.next_token)
        items = select_items(envelope.payload) if envelope.payload is not None else ()
        state.advance(items, envelope.next_token)
        if state.next_token is None:
            return state
