import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Float, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from backend.app.core.constants import FilamentStatus, stock_status
from backend.app.core.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_filament_id() -> str:
    return str(uuid.uuid4())


class Filament(Base):
    """A filament offering owned by the user: one brand/material/color spool type."""

    __tablename__ = "filaments"
    __table_args__ = (Index("ix_filaments_brand_material", "brand", "material"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_filament_id)
    brand: Mapped[str] = mapped_column(String(100))
    material: Mapped[str] = mapped_column(String(50))  # PLA, PETG, ABS, etc.

    color_name: Mapped[str] = mapped_column(String(100), default="")  # "Matte Black"
    color_hex: Mapped[str] = mapped_column(String(7))  # #RRGGBB
    color_family: Mapped[str] = mapped_column(String(20))  # Black, White, Blue, ...

    diameter: Mapped[float] = mapped_column(Float, default=1.75)  # mm
    spool_weight: Mapped[float] = mapped_column(Float, default=1000)  # Net filament weight (g)
    quantity: Mapped[int] = mapped_column(Integer, default=1)  # Spool count
    weight_remaining: Mapped[float | None] = mapped_column(Float)  # Grams left on the open spool

    print_temp_min: Mapped[int | None] = mapped_column(Integer)
    print_temp_max: Mapped[int | None] = mapped_column(Integer)
    bed_temp_min: Mapped[int | None] = mapped_column(Integer)
    bed_temp_max: Mapped[int | None] = mapped_column(Integer)

    price: Mapped[float | None] = mapped_column(Float)
    purchase_url: Mapped[str | None] = mapped_column(String(500))

    notes: Mapped[str | None] = mapped_column(Text)
    tags: Mapped[str] = mapped_column(String(500), default="")  # Comma-separated
    image_url: Mapped[str | None] = mapped_column(String(500))
    favorite: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    def __init__(self, **kwargs):
        # Identity and timestamps are assigned up front so transient instances
        # (decoded imports, test fixtures) are complete before any flush.
        now = utcnow()
        kwargs.setdefault("id", new_filament_id())
        kwargs.setdefault("created_at", now)
        kwargs.setdefault("updated_at", now)
        for column, default in _COLUMN_DEFAULTS.items():
            kwargs.setdefault(column, default)
        super().__init__(**kwargs)

    @property
    def display_name(self) -> str:
        if not self.color_name:
            return f"{self.brand} {self.material}"
        return f"{self.brand} {self.material} - {self.color_name}"

    @property
    def tag_list(self) -> list[str]:
        return [tag.strip() for tag in (self.tags or "").split(",") if tag.strip()]

    @property
    def status(self) -> FilamentStatus:
        return stock_status(self.quantity)

    @property
    def print_temp_range(self) -> str | None:
        if self.print_temp_min is None or self.print_temp_max is None:
            return None
        return f"{self.print_temp_min} - {self.print_temp_max} °C"

    @property
    def bed_temp_range(self) -> str | None:
        if self.bed_temp_min is None or self.bed_temp_max is None:
            return None
        return f"{self.bed_temp_min} - {self.bed_temp_max} °C"

    def touch(self) -> None:
        """Mark the record as modified now."""
        self.updated_at = utcnow()

    def __repr__(self) -> str:
        return f"<Filament {self.id} {self.display_name!r} x{self.quantity}>"


_COLUMN_DEFAULTS = {
    "color_name": "",
    "diameter": 1.75,
    "spool_weight": 1000.0,
    "quantity": 1,
    "tags": "",
    "favorite": False,
}
