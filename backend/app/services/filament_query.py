"""Search, filter and sort for the filament catalog.

Everything here is a pure function of its inputs: callers pass a snapshot of
filament records and a ``QueryState`` and get back a new, ordered list.
Records are read through attributes only (``brand``, ``material``,
``color_name``, ``color_family``, ``tags``, ``quantity``, ``favorite``,
``price``, ``created_at`` and ``display_name``), so ORM rows and plain objects
both work.
"""

import math
import re
import unicodedata
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from enum import StrEnum

from backend.app.core.constants import resolve_low_stock_threshold, stock_status

_DIGIT_RUN = re.compile(r"(\d+)")

# QueryState fields that hold a set of accepted values
SET_FIELDS = ("materials", "brands", "color_families", "statuses")


class SortOption(StrEnum):
    """Catalog orderings offered to clients."""

    NAME_ASC = "name_asc"
    NAME_DESC = "name_desc"
    BRAND_ASC = "brand_asc"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    QUANTITY_DESC = "quantity_desc"
    QUANTITY_ASC = "quantity_asc"
    NEWEST_FIRST = "newest_first"
    OLDEST_FIRST = "oldest_first"

    @property
    def label(self) -> str:
        return _SORT_LABELS[self]


_SORT_LABELS = {
    SortOption.NAME_ASC: "Name (A-Z)",
    SortOption.NAME_DESC: "Name (Z-A)",
    SortOption.BRAND_ASC: "Brand (A-Z)",
    SortOption.PRICE_ASC: "Price (Low)",
    SortOption.PRICE_DESC: "Price (High)",
    SortOption.QUANTITY_DESC: "Quantity (Most)",
    SortOption.QUANTITY_ASC: "Quantity (Least)",
    SortOption.NEWEST_FIRST: "Newest First",
    SortOption.OLDEST_FIRST: "Oldest First",
}


@dataclass(frozen=True)
class QueryState:
    """Active search text, filter selections and sort order for a catalog view."""

    search: str = ""
    materials: frozenset[str] = field(default_factory=frozenset)
    brands: frozenset[str] = field(default_factory=frozenset)
    color_families: frozenset[str] = field(default_factory=frozenset)
    statuses: frozenset[str] = field(default_factory=frozenset)
    favorites_only: bool = False
    sort: SortOption = SortOption.NEWEST_FIRST

    def __post_init__(self):
        # Accept any iterable for the set fields but always store frozensets
        for name in SET_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, frozenset):
                object.__setattr__(self, name, frozenset(value))
        if not isinstance(self.sort, SortOption):
            object.__setattr__(self, "sort", SortOption(self.sort))

    @property
    def is_empty(self) -> bool:
        """True when no filter (search and sort aside) is active."""
        return not any(getattr(self, name) for name in SET_FIELDS) and not self.favorites_only

    @property
    def active_count(self) -> int:
        return sum(len(getattr(self, name)) for name in SET_FIELDS) + (1 if self.favorites_only else 0)

    def toggle(self, field_name: str, value: str) -> "QueryState":
        """Return a copy with ``value`` added to or removed from a filter set."""
        if field_name not in SET_FIELDS:
            raise ValueError(f"Unknown filter set: {field_name}")
        return replace(self, **{field_name: getattr(self, field_name) ^ {value}})

    def toggle_favorites(self) -> "QueryState":
        return replace(self, favorites_only=not self.favorites_only)

    def cleared(self) -> "QueryState":
        """Drop every filter selection, keeping search text and sort order."""
        return QueryState(search=self.search, sort=self.sort)


def natural_key(text: str) -> tuple:
    """Case-insensitive sort key that orders digit runs numerically ("PLA 2" < "PLA 10")."""
    folded = unicodedata.normalize("NFKD", text or "").casefold()
    # re.split with a capture group alternates text, digits, text, ... so
    # int and str never land in the same position of two keys
    return tuple(int(part) if i % 2 else part for i, part in enumerate(_DIGIT_RUN.split(folded)))


def matches_search(record, search: str) -> bool:
    """Case-insensitive substring match over name, brand, color, material and tags."""
    needle = search.casefold()
    haystacks = (record.display_name, record.brand, record.color_name, record.material, record.tags)
    return any(needle in (value or "").casefold() for value in haystacks)


def _predicates(query: QueryState, threshold: int) -> list[Callable]:
    predicates: list[Callable] = []
    if query.search:
        predicates.append(lambda r: matches_search(r, query.search))
    if query.materials:
        predicates.append(lambda r: r.material in query.materials)
    if query.brands:
        predicates.append(lambda r: r.brand in query.brands)
    if query.color_families:
        predicates.append(lambda r: r.color_family in query.color_families)
    if query.statuses:
        predicates.append(lambda r: stock_status(r.quantity, threshold) in query.statuses)
    if query.favorites_only:
        predicates.append(lambda r: bool(r.favorite))
    return predicates


def filter_records(records: Iterable, query: QueryState, low_stock_threshold: int | None = None) -> list:
    """Keep the records that satisfy every active filter, in input order."""
    threshold = resolve_low_stock_threshold(low_stock_threshold)
    predicates = _predicates(query, threshold)
    return [record for record in records if all(check(record) for check in predicates)]


def sort_records(records: Iterable, option: SortOption) -> list:
    """Stable sort; records comparing equal keep their relative order."""
    option = SortOption(option)
    records = list(records)

    if option == SortOption.NAME_ASC:
        return sorted(records, key=lambda r: natural_key(r.display_name))
    if option == SortOption.NAME_DESC:
        return sorted(records, key=lambda r: natural_key(r.display_name), reverse=True)
    if option == SortOption.BRAND_ASC:
        return sorted(records, key=lambda r: natural_key(r.brand))
    if option == SortOption.PRICE_ASC:
        # Unpriced items go last
        return sorted(records, key=lambda r: math.inf if r.price is None else r.price)
    if option == SortOption.PRICE_DESC:
        # Unpriced items count as free, which puts them last
        return sorted(records, key=lambda r: 0 if r.price is None else r.price, reverse=True)
    if option == SortOption.QUANTITY_DESC:
        return sorted(records, key=lambda r: r.quantity, reverse=True)
    if option == SortOption.QUANTITY_ASC:
        return sorted(records, key=lambda r: r.quantity)
    if option == SortOption.NEWEST_FIRST:
        return sorted(records, key=lambda r: r.created_at, reverse=True)
    return sorted(records, key=lambda r: r.created_at)


def apply(records: Iterable, query: QueryState, low_stock_threshold: int | None = None) -> list:
    """Filter then sort ``records`` according to ``query``.

    Returns a new list; the input sequence and its records are not modified.
    """
    return sort_records(filter_records(records, query, low_stock_threshold), query.sort)
