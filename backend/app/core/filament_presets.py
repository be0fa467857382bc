"""Manufacturer print presets for common brand/material combinations.

Temperatures are taken from the manufacturers' published recommendations.
The tables are built once at import time and never modified afterwards.
"""

from dataclasses import dataclass
from types import MappingProxyType

from backend.app.core.constants import MATERIALS


@dataclass(frozen=True)
class FilamentPreset:
    print_temp_min: int
    print_temp_max: int
    bed_temp_min: int
    bed_temp_max: int
    product_url: str | None = None


_SUNLU = "https://store.sunlu.com/products/"

# (brand, material, print min, print max, bed min, bed max, product url)
_PRESET_ROWS: tuple[tuple[str, str, int, int, int, int, str | None], ...] = (
    # Bambu Lab
    ("Bambu Lab", "PLA", 190, 230, 35, 45, "https://us.store.bambulab.com/products/pla-basic-filament"),
    ("Bambu Lab", "PLA Basic", 190, 230, 35, 45, "https://us.store.bambulab.com/products/pla-basic-filament"),
    ("Bambu Lab", "PLA Matte", 190, 230, 35, 45, "https://us.store.bambulab.com/products/pla-matte"),
    ("Bambu Lab", "PETG", 220, 260, 65, 75, "https://us.store.bambulab.com/products/petg-hf"),
    ("Bambu Lab", "ABS", 240, 280, 90, 100, "https://us.store.bambulab.com/products/abs-filament"),
    ("Bambu Lab", "ASA", 240, 280, 90, 100, "https://us.store.bambulab.com/products/asa-filament"),
    ("Bambu Lab", "TPU", 220, 240, 30, 35, "https://us.store.bambulab.com/products/tpu-95a-hf"),
    ("Bambu Lab", "Nylon", 260, 290, 80, 100, "https://us.store.bambulab.com/products/pa6-cf"),
    ("Bambu Lab", "PC", 260, 290, 90, 110, "https://us.store.bambulab.com/products/pc-filament"),
    ("Bambu Lab", "PVA", 220, 250, 35, 45, "https://us.store.bambulab.com/products/pva"),
    ("Bambu Lab", "HIPS", 240, 250, 90, 100, None),
    ("Bambu Lab", "Silk", 210, 240, 35, 45, "https://us.store.bambulab.com/products/pla-silk-upgrade"),
    # Polymaker
    ("Polymaker", "PLA", 190, 230, 25, 60, "https://shop.polymaker.com/products/polylite-pla"),
    ("Polymaker", "PETG", 230, 260, 70, 80, "https://shop.polymaker.com/products/polylite-petg"),
    ("Polymaker", "ABS", 245, 265, 90, 100, "https://shop.polymaker.com/products/polylite-abs"),
    ("Polymaker", "ASA", 240, 260, 75, 95, "https://shop.polymaker.com/products/polymaker-asa"),
    ("Polymaker", "TPU", 210, 230, 25, 60, "https://shop.polymaker.com/products/polyflex-tpu95"),
    ("Polymaker", "Nylon", 280, 300, 25, 50, "https://shop.polymaker.com/products/polymide-copa"),
    ("Polymaker", "PC", 250, 270, 90, 105, "https://shop.polymaker.com/products/polylite-pc"),
    ("Polymaker", "PVA", 215, 225, 25, 60, "https://shop.polymaker.com/products/polydissolve-s1"),
    ("Polymaker", "Silk", 190, 230, 25, 60, "https://shop.polymaker.com/products/panchroma-silk"),
    ("Polymaker", "Carbon Fiber", 210, 230, 30, 70, "https://shop.polymaker.com/products/fiberon-pa6-cf20"),
    # eSUN
    ("eSUN", "PLA+", 205, 225, 60, 80, "https://www.esun3d.com/pla-pro-product/"),
    ("eSUN", "PETG", 230, 260, 75, 90, "https://www.esun3d.com/petg-product/"),
    ("eSUN", "ABS", 230, 270, 95, 110, "https://www.esun3d.com/abs-pro-product/"),
    ("eSUN", "ASA", 240, 270, 90, 110, "https://www.esun3d.com/asa-pro-product/"),
    ("eSUN", "TPU", 220, 250, 45, 60, "https://www.esun3d.com/etpu-95a-product/"),
    ("eSUN", "Nylon", 250, 290, 70, 90, "https://www.esun3d.com/epa-product/"),
    ("eSUN", "PC", 240, 270, 80, 120, "https://www.esun3d.com/epc-product/"),
    ("eSUN", "PVA", 180, 230, 45, 60, "https://www.esun3d.com/pva-pro-product/"),
    ("eSUN", "HIPS", 230, 270, 100, 115, "https://www.esun3d.com/hips-product/"),
    ("eSUN", "Wood", 210, 235, 45, 60, "https://www.esun3d.com/wood-product/"),
    ("eSUN", "Silk", 190, 230, 45, 60, "https://www.esun3d.com/esilk-pla-product/"),
    ("eSUN", "Marble", 190, 230, 45, 60, "https://www.esun3d.com/emarble-product/"),
    ("eSUN", "Glow-in-Dark", 210, 230, 45, 60, "https://www.esun3d.com/pla-luminous-product/"),
    ("eSUN", "Carbon Fiber", 260, 300, 60, 90, "https://www.esun3d.com/epa-cf-product/"),
    # Prusament
    ("Prusament", "PLA", 200, 220, 40, 60, "https://prusament.com/materials/pla/"),
    ("Prusament", "PETG", 240, 260, 70, 90, "https://prusament.com/materials/prusament-petg/"),
    ("Prusament", "ASA", 255, 265, 105, 115, "https://prusament.com/materials/prusament-asa/"),
    ("Prusament", "Nylon", 275, 295, 100, 120, "https://prusament.com/materials/prusament-pa11-nylon-carbon-fiber/"),
    ("Prusament", "PC", 265, 285, 100, 120, "https://prusament.com/materials/prusament-pc-blend/"),
    # Overture
    ("Overture", "PLA", 190, 220, 25, 60, "https://www.overture3d.com/products/overture-pla"),
    (
        "Overture",
        "PLA+",
        190,
        230,
        25,
        60,
        "https://www.overture3d.com/products/overture-super-pla-3d-printer-filament-1-75mm",
    ),
    ("Overture", "PETG", 230, 250, 80, 90, "https://www.overture3d.com/products/overture-petg"),
    ("Overture", "ABS", 245, 265, 80, 100, "https://www.overture3d.com/products/overture-abs-filament-1-75mm"),
    ("Overture", "TPU", 210, 230, 25, 60, "https://www.overture3d.com/products/overture-tpu"),
    ("Overture", "Nylon", 245, 260, 50, 50, "https://www.overture3d.com/products/easy-nylon-filament"),
    (
        "Overture",
        "Silk",
        200,
        220,
        50,
        60,
        "https://www.overture3d.com/products/overture-silk-pla-3d-printer-filament-1-75mm",
    ),
    ("Overture", "Wood", 190, 230, 50, 70, "https://www.overture3d.com/products/overture-matte-pla"),
    ("Overture", "Marble", 190, 220, 50, 70, "https://www.overture3d.com/products/overture-rock-pla-filament-1-75mm"),
    ("Overture", "Glow-in-Dark", 190, 220, 25, 60, "https://www.overture3d.com/products/overture-glow-pla"),
    # Sunlu
    (
        "Sunlu",
        "PLA",
        200,
        230,
        60,
        80,
        _SUNLU + "over-6kg-of-pla-pla-meta-3d-filaments-1kg-2-2lbs-fit-most-of-fdm-printer",
    ),
    ("Sunlu", "PLA+", 215, 235, 60, 80, _SUNLU + "moq-6kg-pla-2-0-upgraded-pla-pla-plus-3d-printer-filament-1kg"),
    ("Sunlu", "PETG", 220, 250, 60, 80, _SUNLU + "over-6kg-bundle-sale-petg-3d-printer-filament-1-75mm-1kg-roll"),
    ("Sunlu", "ABS", 250, 260, 80, 110, _SUNLU + "over-6kg-bundle-sale-abs-filament-1kg-roll"),
    ("Sunlu", "ASA", 240, 260, 90, 110, _SUNLU + "sunlu-asa-filament-1-75mm"),
    ("Sunlu", "TPU", 205, 230, 25, 60, _SUNLU + "moq-3kg-tpu-3d-printer-filament-1kg"),
    ("Sunlu", "Silk", 205, 235, 50, 60, _SUNLU + "over-6kg-of-sunlu-silk-pla-3d-printer-filament-1-75mm-1kg-2-2lbs"),
    (
        "Sunlu",
        "Wood",
        190,
        220,
        25,
        80,
        _SUNLU + "optimized-wood-pla-3d-printer-filament-1kg-optimized-and-upgraded-wood-texture",
    ),
    ("Sunlu", "Marble", 190, 230, 25, 60, _SUNLU + "pla-marble-1-75mm-filament-1kg-2-2lbs-fit-most-of-fdm-3d-printer"),
    (
        "Sunlu",
        "Glow-in-Dark",
        200,
        210,
        50,
        65,
        _SUNLU + "1-75mm-sunlu-glow-in-the-darkluminous-3d-printer-filament-1kg-roll",
    ),
)


def _build_presets() -> MappingProxyType:
    presets = {
        (brand, material): FilamentPreset(print_min, print_max, bed_min, bed_max, url)
        for brand, material, print_min, print_max, bed_min, bed_max, url in _PRESET_ROWS
    }
    return MappingProxyType(presets)


def _build_brand_materials(presets) -> MappingProxyType:
    by_brand: dict[str, set[str]] = {}
    for brand, material in presets:
        by_brand.setdefault(brand, set()).add(material)
    # Order each brand's materials the same way as the canonical material list
    return MappingProxyType(
        {brand: tuple(m for m in MATERIALS if m in materials) for brand, materials in by_brand.items()}
    )


FILAMENT_PRESETS = _build_presets()
BRAND_MATERIALS = _build_brand_materials(FILAMENT_PRESETS)


def lookup_preset(brand: str, material: str) -> FilamentPreset | None:
    """Return the manufacturer preset for a brand/material pair, if one is known."""
    return FILAMENT_PRESETS.get((brand, material))


def materials_for_brand(brand: str) -> tuple[str, ...]:
    """Materials a brand is known to sell, falling back to every material."""
    return BRAND_MATERIALS.get(brand, MATERIALS)
