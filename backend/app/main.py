import logging
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler

from fastapi import FastAPI

from backend.app.core.config import APP_VERSION
from backend.app.core.config import settings as app_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_FILE_NAME = "filament_inventory.log"


def configure_logging() -> str:
    """Attach console (and optionally rotating file) handlers to the root logger.

    DEBUG=true wins over LOG_LEVEL. Returns the effective level name.
    """
    level_name = "DEBUG" if app_settings.debug else app_settings.log_level.upper()
    level = getattr(logging, level_name, logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT)

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if app_settings.log_to_file:
        handlers.append(
            RotatingFileHandler(
                app_settings.log_dir / LOG_FILE_NAME,
                maxBytes=5 * 1024 * 1024,  # 5MB
                backupCount=3,
                encoding="utf-8",
            )
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    # SQL echo and driver chatter only in debug mode
    if not app_settings.debug:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
        logging.getLogger("aiosqlite").setLevel(logging.WARNING)

    if app_settings.log_to_file:
        logging.info(f"Logging to file: {app_settings.log_dir / LOG_FILE_NAME}")
    return level_name


_log_level_name = configure_logging()
logging.info(f"{app_settings.app_name} {APP_VERSION} starting - debug={app_settings.debug}, log_level={_log_level_name}")

from backend.app.api.routes import filaments  # noqa: E402
from backend.app.core.database import close_db, init_db  # noqa: E402


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    yield
    await close_db()


app = FastAPI(
    title=app_settings.app_name,
    description="Track 3D printer filament spools, search the collection and exchange it as JSON",
    version=APP_VERSION,
    lifespan=lifespan,
)

app.include_router(filaments.router, prefix=app_settings.api_prefix)


@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": APP_VERSION}
