import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator
from pydantic.alias_generators import to_camel

from backend.app.core.constants import FilamentStatus

HEX_COLOR_RE = re.compile(r"^#?[0-9A-Fa-f]{6}$")

_TEMP_PAIRS = (("print_temp_min", "print_temp_max"), ("bed_temp_min", "bed_temp_max"))

# Interchange fields with a non-null default
_NULL_AS_DEFAULT = ("color_name", "diameter", "spool_weight", "quantity", "tags", "favorite")


def normalize_hex(value: str) -> str:
    """Validate a 6-digit hex color and return it as ``#RRGGBB``."""
    value = value.strip()
    if not HEX_COLOR_RE.match(value):
        raise ValueError("color_hex must be 6 hex digits, optionally prefixed with '#'")
    return f"#{value.lstrip('#').upper()}"


def normalize_tags(value: str) -> str:
    """Trim each comma-separated tag and drop empty ones."""
    return ",".join(tag.strip() for tag in value.split(",") if tag.strip())


def _check_temp_pairs(values: dict) -> None:
    for low, high in _TEMP_PAIRS:
        if (values.get(low) is None) != (values.get(high) is None):
            raise ValueError(f"{low} and {high} must be set together")
        if values.get(low) is not None and values[low] > values[high]:
            raise ValueError(f"{low} must not exceed {high}")


class FilamentFields(BaseModel):
    brand: str
    material: str
    color_name: str = ""
    color_hex: str
    color_family: str
    diameter: float = 1.75
    spool_weight: float = 1000
    quantity: int = 1
    weight_remaining: float | None = None
    print_temp_min: int | None = None
    print_temp_max: int | None = None
    bed_temp_min: int | None = None
    bed_temp_max: int | None = None
    price: float | None = None
    purchase_url: str | None = None
    notes: str | None = None
    tags: str = ""
    image_url: str | None = None
    favorite: bool = False


class FilamentBase(FilamentFields):
    # Column widths and ranges apply to records entered through the API
    brand: str = Field(..., min_length=1, max_length=100)
    material: str = Field(..., min_length=1, max_length=50)
    color_name: str = Field("", max_length=100)
    color_family: str = Field(..., min_length=1, max_length=20)
    diameter: float = Field(1.75, gt=0)
    spool_weight: float = Field(1000, gt=0)
    quantity: int = Field(1, ge=0)
    weight_remaining: float | None = Field(None, ge=0)
    price: float | None = Field(None, ge=0)

    @field_validator("color_hex")
    @classmethod
    def _normalize_hex(cls, v: str) -> str:
        return normalize_hex(v)

    @field_validator("tags")
    @classmethod
    def _normalize_tags(cls, v: str) -> str:
        return normalize_tags(v)

    @model_validator(mode="after")
    def _check_temps(self):
        _check_temp_pairs(self.__dict__)
        return self


class FilamentCreate(FilamentBase):
    pass


class FilamentUpdate(BaseModel):
    brand: str | None = Field(None, min_length=1, max_length=100)
    material: str | None = Field(None, min_length=1, max_length=50)
    color_name: str | None = None
    color_hex: str | None = None
    color_family: str | None = None
    diameter: float | None = Field(None, gt=0)
    spool_weight: float | None = Field(None, gt=0)
    quantity: int | None = Field(None, ge=0)
    weight_remaining: float | None = Field(None, ge=0)
    print_temp_min: int | None = None
    print_temp_max: int | None = None
    bed_temp_min: int | None = None
    bed_temp_max: int | None = None
    price: float | None = Field(None, ge=0)
    purchase_url: str | None = None
    notes: str | None = None
    tags: str | None = None
    image_url: str | None = None
    favorite: bool | None = None

    @field_validator("color_hex")
    @classmethod
    def _normalize_hex(cls, v: str | None) -> str | None:
        return normalize_hex(v) if v is not None else v

    @field_validator("tags")
    @classmethod
    def _normalize_tags(cls, v: str | None) -> str | None:
        return normalize_tags(v) if v is not None else v


class FilamentResponse(FilamentFields):
    id: str
    display_name: str
    status: FilamentStatus
    tag_list: list[str] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class FilamentTransfer(BaseModel):
    """One element of the import/export JSON file.

    Keys are camelCase on the wire. Types are checked strictly so that, for
    example, ``"3"`` is rejected as a quantity rather than coerced.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        strict=True,
    )

    brand: str = Field(..., min_length=1)
    material: str = Field(..., min_length=1)
    color_name: str = ""
    color_hex: str = Field(..., pattern=HEX_COLOR_RE.pattern)
    color_family: str = Field(..., min_length=1)
    diameter: float = Field(1.75, gt=0)
    spool_weight: float = Field(1000, gt=0)
    quantity: int = Field(1, ge=0)
    weight_remaining: float | None = None
    print_temp_min: int | None = None
    print_temp_max: int | None = None
    bed_temp_min: int | None = None
    bed_temp_max: int | None = None
    price: float | None = None
    purchase_url: str | None = None
    notes: str | None = None
    tags: str = ""
    image_url: str | None = None
    favorite: bool = False

    @field_validator(*_NULL_AS_DEFAULT, mode="before")
    @classmethod
    def _null_as_default(cls, v, info: ValidationInfo):
        # An explicit null reads the same as an omitted key
        if v is None:
            return cls.model_fields[info.field_name].default
        return v


TRANSFER_FIELDS: tuple[str, ...] = tuple(FilamentTransfer.model_fields)


class DuplicateMatchResponse(BaseModel):
    existing_id: str
    existing_name: str
    existing_quantity: int
    imported_name: str
    imported_quantity: int


class ImportAnalysisResponse(BaseModel):
    total: int
    new_count: int
    duplicate_count: int
    new_filaments: list[str] = []  # Display names, import order
    duplicates: list[DuplicateMatchResponse] = []


class ImportResultResponse(BaseModel):
    inserted: int
    merged: int
    skipped: int


class LabelCount(BaseModel):
    label: str
    count: int


class InventoryStatsResponse(BaseModel):
    total_filaments: int
    total_spools: int
    estimated_value: float
    unique_materials: int
    unique_brands: int
    status_counts: dict[str, int]
    material_counts: list[LabelCount]
    brand_counts: list[LabelCount]
    needs_attention: list[FilamentResponse]


class FilamentOptionsResponse(BaseModel):
    materials: list[str]
    brands: list[str]
    color_families: dict[str, str]  # name -> swatch hex
    statuses: dict[str, str]  # value -> label
    sort_options: dict[str, str]  # value -> label


class FilamentPresetResponse(BaseModel):
    found: bool
    print_temp_min: int | None = None
    print_temp_max: int | None = None
    bed_temp_min: int | None = None
    bed_temp_max: int | None = None
    product_url: str | None = None
