from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, Optional, Set, Tuple, Union


class InvalidArgument(ValueError):
    """Raised when a query input falls outside its allowed values."""

    pass


class SortOrder(Enum):
    """Orderings offered for the result view."""

    NEWEST = "newest"
    OLDEST = "oldest"
    AZ = "az"
    ZA = "za"

    @classmethod
    def parse(cls, value: Union["SortOrder", str]) -> "SortOrder":
        """
        Resolve a SortOrder from an enum member or its string value.

        The listing UI's option values "a-z" and "z-a" are accepted as aliases.

        Raises:
            InvalidArgument: If the value names no known ordering.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            normalized = _SORT_ALIASES.get(normalized, normalized)
            for member in cls:
                if member.value == normalized:
                    return member
        raise InvalidArgument(
            f"Unknown sort order {value!r}; expected one of "
            f"{', '.join(m.value for m in cls)}"
        )


_SORT_ALIASES = {"a-z": "az", "z-a": "za"}


class TagMatchPolicy(Enum):
    """How a multi-tag selection is matched against a post's tags."""

    ANY = "any"  # at least one selected tag present
    ALL = "all"  # every selected tag present

    @classmethod
    def parse(cls, value: Union["TagMatchPolicy", str]) -> "TagMatchPolicy":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if member.value == normalized:
                    return member
        raise InvalidArgument(
            f"Unknown tag match policy {value!r}; expected 'any' or 'all'"
        )


@dataclass(frozen=True)
class Post:
    """
    A single content record being listed and filtered.

    `hero_image` and `reading_time` are display payloads carried through
    untouched; nothing in the query path reads them.
    """

    id: str
    title: str
    description: str
    published_at: datetime
    tags: Tuple[str, ...] = ()
    slug: str = ""
    hero_image: Optional[Any] = field(default=None, compare=False, repr=False)
    reading_time: str = ""

    def __post_init__(self):
        # Absent tags and list input both normalize to a tuple; a bare
        # string is a single tag
        if self.tags is None:
            object.__setattr__(self, "tags", ())
        elif isinstance(self.tags, str):
            object.__setattr__(self, "tags", (self.tags,))
        elif not isinstance(self.tags, tuple):
            object.__setattr__(self, "tags", tuple(self.tags))

        # Naive timestamps are taken as UTC
        if self.published_at.tzinfo is None:
            object.__setattr__(
                self, "published_at", self.published_at.replace(tzinfo=timezone.utc)
            )

        if not self.slug:
            object.__setattr__(self, "slug", self.id)


@dataclass
class QueryState:
    """The three user-controlled inputs of a query."""

    search_text: str = ""
    selected_tags: Set[str] = field(default_factory=set)
    sort_order: SortOrder = SortOrder.NEWEST

    def copy(self) -> "QueryState":
        return QueryState(
            search_text=self.search_text,
            selected_tags=set(self.selected_tags),
            sort_order=self.sort_order,
        )

    @classmethod
    def from_values(
        cls,
        search_text: str = "",
        selected_tags: Optional[Iterable[str]] = None,
        sort_order: Union[SortOrder, str] = SortOrder.NEWEST,
    ) -> "QueryState":
        return cls(
            search_text=search_text or "",
            selected_tags=set(selected_tags or ()),
            sort_order=SortOrder.parse(sort_order),
        )
