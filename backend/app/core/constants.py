"""Static palettes and stock status rules for the filament inventory.

Material, brand and color family lists drive the filter options offered to
clients and the ordering of brand preset materials.
"""

from enum import StrEnum

from backend.app.core.config import settings

# Fallback low-stock threshold when no explicit override is given
LOW_STOCK_THRESHOLD = 1

MATERIALS: tuple[str, ...] = (
    "PLA",
    "PLA Basic",
    "PLA Matte",
    "PLA+",
    "PETG",
    "ABS",
    "ASA",
    "TPU",
    "Nylon",
    "PC",
    "PVA",
    "HIPS",
    "Wood",
    "Carbon Fiber",
    "Silk",
    "Marble",
    "Glow-in-Dark",
    "Other",
)

BRANDS: tuple[str, ...] = (
    "Bambu Lab",
    "Polymaker",
    "eSUN",
    "Prusament",
    "Overture",
    "Sunlu",
    "Other",
)

# Swatch color shown for each color family
COLOR_FAMILY_HEX: dict[str, str] = {
    "Black": "#1a1a1a",
    "White": "#f5f5f5",
    "Gray": "#9ca3af",
    "Red": "#dc2626",
    "Orange": "#f97316",
    "Yellow": "#eab308",
    "Green": "#16a34a",
    "Blue": "#3b82f6",
    "Purple": "#7c3aed",
    "Pink": "#ec4899",
    "Brown": "#92400e",
    "Gold": "#d4a843",
    "Silver": "#c0c0c0",
    "Clear": "#e2e8f0",
    "Multi": "#888888",
}

COLOR_FAMILIES: tuple[str, ...] = tuple(COLOR_FAMILY_HEX)


class FilamentStatus(StrEnum):
    """Stock level of a filament, derived from its spool count."""

    IN_STOCK = "in_stock"
    LOW = "low"
    EMPTY = "empty"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]


_STATUS_LABELS = {
    FilamentStatus.IN_STOCK: "In Stock",
    FilamentStatus.LOW: "Low Stock",
    FilamentStatus.EMPTY: "Empty",
}


def resolve_low_stock_threshold(threshold: int | None = None) -> int:
    """Return the explicit threshold, else the configured one, else the default."""
    if threshold is not None:
        return threshold
    if settings.low_stock_threshold is not None:
        return settings.low_stock_threshold
    return LOW_STOCK_THRESHOLD


def stock_status(quantity: int, threshold: int | None = None) -> FilamentStatus:
    """Classify a spool count as empty, low or in stock."""
    if quantity <= 0:
        return FilamentStatus.EMPTY
    if quantity <= resolve_low_stock_threshold(threshold):
        return FilamentStatus.LOW
    return FilamentStatus.IN_STOCK
