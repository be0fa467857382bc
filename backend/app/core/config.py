"""Application settings, read from environment variables or a ``.env`` file."""

from pathlib import Path

from pydantic_settings import BaseSettings

APP_VERSION = "0.3.0"

# Repository root; the database file and logs live here unless overridden
_base_dir = Path(__file__).resolve().parents[3]


class Settings(BaseSettings):
    app_name: str = "Filament Inventory"
    debug: bool = False

    base_dir: Path = _base_dir
    log_dir: Path = _base_dir / "logs"
    database_url: str = f"sqlite+aiosqlite:///{_base_dir / 'filament_inventory.db'}"

    log_level: str = "INFO"  # DEBUG=true forces DEBUG
    log_to_file: bool = True

    api_prefix: str = "/api/v1"

    # Spool count at or below which a non-empty filament is reported as low (unset: 1)
    low_stock_threshold: int | None = None
    # File name offered for the JSON export download
    export_filename: str = "filament-inventory.json"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()

if settings.log_to_file:
    settings.log_dir.mkdir(parents=True, exist_ok=True)
