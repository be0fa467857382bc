"""Import reconciliation: match an imported batch against the existing inventory.

``analyze_import`` is pure: it only classifies imported records as new or as
duplicates of an existing record. ``apply_import`` is the caller side that
writes the chosen resolution to the database.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum

from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

# Attributes that decide whether two records are the same spool type
IDENTITY_FIELDS = ("brand", "material", "color_name", "color_hex", "diameter", "spool_weight")


class ImportPolicy(StrEnum):
    """How to resolve imported records that duplicate existing ones."""

    SKIP = "skip"
    MERGE = "merge"


def identity_key(record) -> tuple:
    return tuple(getattr(record, name) for name in IDENTITY_FIELDS)


def matches_identity(a, b) -> bool:
    """Whether two records describe the same spool type.

    Compares brand, material, color name, color hex, diameter and spool weight
    exactly. Quantity, price and every other attribute are ignored.
    """
    return identity_key(a) == identity_key(b)


@dataclass(frozen=True)
class DuplicateMatch:
    existing: object
    imported: object


@dataclass
class ImportAnalysis:
    new_filaments: list = field(default_factory=list)
    duplicates: list[DuplicateMatch] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.new_filaments) + len(self.duplicates)

    @property
    def has_duplicates(self) -> bool:
        return bool(self.duplicates)

    def merge_increments(self) -> list[tuple[object, int]]:
        """Total quantity to add to each matched existing record.

        Several imported records may match the same existing record; their
        quantities are summed. Records appear in order of first match.
        """
        totals: dict[int, list] = {}
        for match in self.duplicates:
            entry = totals.setdefault(id(match.existing), [match.existing, 0])
            entry[1] += match.imported.quantity
        return [(existing, increment) for existing, increment in totals.values()]


@dataclass
class ImportResult:
    inserted: int = 0
    merged: int = 0
    skipped: int = 0


def analyze_import(imported: Iterable, existing: Sequence) -> ImportAnalysis:
    """Split ``imported`` into new records and duplicates of ``existing``.

    Each imported record is paired with the first existing record (in
    ``existing`` order) that has the same identity. Imported records are never
    compared with each other. Both output lists keep import order.
    """
    analysis = ImportAnalysis()
    for record in imported:
        match = next((candidate for candidate in existing if matches_identity(candidate, record)), None)
        if match is None:
            analysis.new_filaments.append(record)
        else:
            analysis.duplicates.append(DuplicateMatch(existing=match, imported=record))
    return analysis


def merge_duplicates(analysis: ImportAnalysis) -> int:
    """Add each duplicate's quantity to its existing record, in import order.

    Mutates the existing records and refreshes their ``updated_at``. Returns
    the number of duplicate records folded in.
    """
    for match in analysis.duplicates:
        match.existing.quantity += match.imported.quantity
        match.existing.touch()
    return len(analysis.duplicates)


async def apply_import(
    db: AsyncSession,
    analysis: ImportAnalysis,
    policy: ImportPolicy | None = None,
) -> ImportResult:
    """Persist an analyzed import.

    New records are always inserted. Duplicates are merged into their existing
    record or skipped according to ``policy``; a policy is required whenever
    the analysis contains duplicates.
    """
    if analysis.has_duplicates and policy is None:
        raise ValueError("Import contains duplicates; a resolution policy is required")

    result = ImportResult()
    for record in analysis.new_filaments:
        db.add(record)
        result.inserted += 1

    if analysis.has_duplicates:
        if ImportPolicy(policy) == ImportPolicy.MERGE:
            result.merged = merge_duplicates(analysis)
        else:
            result.skipped = len(analysis.duplicates)

    await db.commit()
    logger.info(
        f"Import applied (policy={policy}): {result.inserted} inserted, "
        f"{result.merged} merged, {result.skipped} skipped"
    )
    return result
