"""Aggregate figures for the inventory dashboard."""

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field

from backend.app.core.constants import FilamentStatus, resolve_low_stock_threshold, stock_status

# Order in which records needing attention are listed
_ATTENTION_ORDER = {FilamentStatus.LOW: 0, FilamentStatus.EMPTY: 1}


@dataclass
class InventoryStats:
    total_filaments: int = 0
    total_spools: int = 0
    estimated_value: float = 0.0
    unique_materials: int = 0
    unique_brands: int = 0
    status_counts: dict[str, int] = field(default_factory=dict)
    material_counts: list[tuple[str, int]] = field(default_factory=list)
    brand_counts: list[tuple[str, int]] = field(default_factory=list)
    needs_attention: list = field(default_factory=list)


def spool_counts_by(records: list, attribute: str) -> list[tuple[str, int]]:
    """Sum of spools per attribute value, largest first (ties keep first appearance)."""
    counts: Counter[str] = Counter()
    for record in records:
        counts[getattr(record, attribute)] += record.quantity
    return counts.most_common()


def needs_attention(records: Iterable, low_stock_threshold: int | None = None) -> list:
    """Records that are low or empty, low ones first."""
    threshold = resolve_low_stock_threshold(low_stock_threshold)
    flagged = [(record, stock_status(record.quantity, threshold)) for record in records]
    flagged = [(record, status) for record, status in flagged if status in _ATTENTION_ORDER]
    flagged.sort(key=lambda pair: _ATTENTION_ORDER[pair[1]])
    return [record for record, _ in flagged]


def build_inventory_stats(records: Iterable, low_stock_threshold: int | None = None) -> InventoryStats:
    records = list(records)
    threshold = resolve_low_stock_threshold(low_stock_threshold)

    status_counts = {status.value: 0 for status in FilamentStatus}
    for record in records:
        status_counts[stock_status(record.quantity, threshold).value] += 1

    return InventoryStats(
        total_filaments=len(records),
        total_spools=sum(r.quantity for r in records),
        estimated_value=round(sum((r.price or 0) * r.quantity for r in records), 2),
        unique_materials=len({r.material for r in records}),
        unique_brands=len({r.brand for r in records}),
        status_counts=status_counts,
        material_counts=spool_counts_by(records, "material"),
        brand_counts=spool_counts_by(records, "brand"),
        needs_attention=needs_attention(records, threshold),
    )
