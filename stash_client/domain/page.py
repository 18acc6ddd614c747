"""Paged response envelope returned by list endpoints."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Page:
    """One page of a paginated collection.

    Only ``values`` and ``isLastPage`` are required; the offsets are read
    lazily when the next page is requested.
    """

    values: List[Dict[str, Any]] = field(default_factory=list)
    is_last_page: bool = True
    start: Optional[int] = None
    size: Optional[int] = None
    limit: Optional[int] = None
    next_page_start: Optional[int] = None

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Page":
        return cls(
            values=data["values"],
            is_last_page=bool(data.get("isLastPage")),
            start=data.get("start"),
            size=data.get("size"),
            limit=data.get("limit"),
            next_page_start=data.get("nextPageStart"),
        )

    @property
    def next_start(self) -> int:
        """Offset of the following page.

        Servers that omit ``nextPageStart`` are advanced by this page's own
        ``start + size``, never by the requested limit.
        """
        if self.next_page_start is not None:
            return self.next_page_start
        return self.start + self.size
