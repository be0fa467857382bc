import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import Response
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.config import settings
from backend.app.core.constants import BRANDS, COLOR_FAMILY_HEX, MATERIALS, FilamentStatus
from backend.app.core.database import get_db
from backend.app.core.filament_presets import lookup_preset, materials_for_brand
from backend.app.models.filament import Filament
from backend.app.schemas.filament import (
    DuplicateMatchResponse,
    FilamentCreate,
    FilamentOptionsResponse,
    FilamentPresetResponse,
    FilamentResponse,
    FilamentUpdate,
    ImportAnalysisResponse,
    ImportResultResponse,
    InventoryStatsResponse,
    LabelCount,
)
from backend.app.services.filament_import import ImportAnalysis, ImportPolicy, analyze_import, apply_import
from backend.app.services.filament_query import QueryState, SortOption, apply
from backend.app.services.filament_transfer import (
    EXPORT_MEDIA_TYPE,
    DecodeError,
    decode_filaments,
    encode_filaments,
)
from backend.app.services.inventory_stats import build_inventory_stats

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/filaments", tags=["filaments"])


async def _load_all(db: AsyncSession) -> list[Filament]:
    """Snapshot of the whole inventory in insertion order."""
    result = await db.execute(select(Filament).order_by(Filament.created_at, Filament.id))
    return list(result.scalars().all())


async def _get_or_404(db: AsyncSession, filament_id: str) -> Filament:
    result = await db.execute(select(Filament).where(Filament.id == filament_id))
    filament = result.scalar_one_or_none()
    if not filament:
        raise HTTPException(404, "Filament not found")
    return filament


async def _decode_body(request: Request) -> list[Filament]:
    try:
        return decode_filaments(await request.body())
    except DecodeError as e:
        raise HTTPException(400, str(e))


def _analysis_response(analysis: ImportAnalysis) -> ImportAnalysisResponse:
    return ImportAnalysisResponse(
        total=analysis.total,
        new_count=len(analysis.new_filaments),
        duplicate_count=len(analysis.duplicates),
        new_filaments=[f.display_name for f in analysis.new_filaments],
        duplicates=[
            DuplicateMatchResponse(
                existing_id=match.existing.id,
                existing_name=match.existing.display_name,
                existing_quantity=match.existing.quantity,
                imported_name=match.imported.display_name,
                imported_quantity=match.imported.quantity,
            )
            for match in analysis.duplicates
        ],
    )


@router.get("/", response_model=list[FilamentResponse])
async def list_filaments(
    search: str = "",
    material: list[str] = Query(default=[]),
    brand: list[str] = Query(default=[]),
    color_family: list[str] = Query(default=[]),
    status: list[FilamentStatus] = Query(default=[]),
    favorites_only: bool = False,
    sort: SortOption = SortOption.NEWEST_FIRST,
    db: AsyncSession = Depends(get_db),
):
    """List filaments matching the given search, filters and sort order."""
    query = QueryState(
        search=search.strip(),
        materials=material,
        brands=brand,
        color_families=color_family,
        statuses=[s.value for s in status],
        favorites_only=favorites_only,
        sort=sort,
    )
    return apply(await _load_all(db), query)


@router.post("/", response_model=FilamentResponse)
async def create_filament(
    filament_data: FilamentCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create a new filament entry."""
    filament = Filament(**filament_data.model_dump())
    db.add(filament)
    await db.commit()
    await db.refresh(filament)
    logger.info(f"Created filament {filament.id} ({filament.display_name})")
    return filament


@router.get("/stats", response_model=InventoryStatsResponse)
async def get_inventory_stats(db: AsyncSession = Depends(get_db)):
    """Dashboard totals, breakdowns and the low/empty stock list."""
    stats = build_inventory_stats(await _load_all(db))
    return InventoryStatsResponse(
        total_filaments=stats.total_filaments,
        total_spools=stats.total_spools,
        estimated_value=stats.estimated_value,
        unique_materials=stats.unique_materials,
        unique_brands=stats.unique_brands,
        status_counts=stats.status_counts,
        material_counts=[LabelCount(label=label, count=count) for label, count in stats.material_counts],
        brand_counts=[LabelCount(label=label, count=count) for label, count in stats.brand_counts],
        needs_attention=[FilamentResponse.model_validate(f) for f in stats.needs_attention],
    )


@router.get("/options", response_model=FilamentOptionsResponse)
async def get_filter_options():
    """Values clients can offer in filter and sort pickers."""
    return FilamentOptionsResponse(
        materials=list(MATERIALS),
        brands=list(BRANDS),
        color_families=dict(COLOR_FAMILY_HEX),
        statuses={status.value: status.label for status in FilamentStatus},
        sort_options={option.value: option.label for option in SortOption},
    )


@router.get("/presets/materials", response_model=list[str])
async def get_brand_materials(brand: str):
    """Materials known for a brand (all materials for unknown brands)."""
    return list(materials_for_brand(brand))


@router.get("/presets/lookup", response_model=FilamentPresetResponse)
async def get_preset(brand: str, material: str):
    """Manufacturer temperature preset for a brand/material pair."""
    preset = lookup_preset(brand, material)
    if preset is None:
        return FilamentPresetResponse(found=False)
    return FilamentPresetResponse(
        found=True,
        print_temp_min=preset.print_temp_min,
        print_temp_max=preset.print_temp_max,
        bed_temp_min=preset.bed_temp_min,
        bed_temp_max=preset.bed_temp_max,
        product_url=preset.product_url,
    )


@router.get("/export")
async def export_filaments(db: AsyncSession = Depends(get_db)):
    """Download the whole inventory as a JSON file."""
    filaments = await _load_all(db)
    logger.info(f"Exporting {len(filaments)} filaments")
    return Response(
        content=encode_filaments(filaments),
        media_type=EXPORT_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{settings.export_filename}"'},
    )


@router.post("/import/analyze", response_model=ImportAnalysisResponse)
async def analyze_filament_import(request: Request, db: AsyncSession = Depends(get_db)):
    """Preview an import: which filaments are new and which duplicate existing ones."""
    imported = await _decode_body(request)
    analysis = analyze_import(imported, await _load_all(db))
    return _analysis_response(analysis)


@router.post("/import", response_model=ImportResultResponse)
async def import_filaments(
    request: Request,
    policy: ImportPolicy | None = None,
    db: AsyncSession = Depends(get_db),
):
    """Import a JSON file.

    New filaments are always added. When the file contains filaments that
    already exist, ``policy`` decides whether their quantities are merged into
    the existing entries or the duplicates are skipped; without a policy the
    request is rejected with 409 and nothing is written.
    """
    imported = await _decode_body(request)
    analysis = analyze_import(imported, await _load_all(db))
    logger.info(
        f"Import analyzed: {len(analysis.new_filaments)} new, {len(analysis.duplicates)} duplicate(s)"
    )

    if analysis.has_duplicates and policy is None:
        raise HTTPException(
            409,
            f"{len(analysis.duplicates)} imported filament(s) already exist; choose policy=merge or policy=skip",
        )

    result = await apply_import(db, analysis, policy)
    return ImportResultResponse(inserted=result.inserted, merged=result.merged, skipped=result.skipped)


@router.get("/{filament_id}", response_model=FilamentResponse)
async def get_filament(
    filament_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Get a specific filament."""
    return await _get_or_404(db, filament_id)


@router.patch("/{filament_id}", response_model=FilamentResponse)
async def update_filament(
    filament_id: str,
    filament_data: FilamentUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Update a filament."""
    filament = await _get_or_404(db, filament_id)

    changes = filament_data.model_dump(exclude_unset=True)
    # Re-validate the full record so cross-field rules (temperature pairs) still hold
    try:
        merged = FilamentCreate.model_validate({**FilamentResponse.model_validate(filament).model_dump(), **changes})
    except ValidationError as e:
        raise HTTPException(422, e.errors(include_url=False, include_context=False, include_input=False))
    for field in changes:
        setattr(filament, field, getattr(merged, field))
    filament.touch()

    await db.commit()
    await db.refresh(filament)
    return filament


@router.post("/{filament_id}/favorite", response_model=FilamentResponse)
async def toggle_favorite(
    filament_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Flip a filament's favorite flag."""
    filament = await _get_or_404(db, filament_id)
    filament.favorite = not filament.favorite
    filament.touch()
    await db.commit()
    await db.refresh(filament)
    return filament


@router.delete("/{filament_id}")
async def delete_filament(
    filament_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Delete a filament."""
    filament = await _get_or_404(db, filament_id)

    await db.delete(filament)
    await db.commit()
    logger.info(f"Deleted filament {filament_id}")
    return {"status": "deleted"}
