# course_service/main.py
import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.config import get_int, parse_origins
from shared.datastore import JsonFileStore
from .pages import DetailPageRenderer
from .routes import build_router
from .settings import Settings, load_settings

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger("course-service")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()

    app = FastAPI(title="Course Service", version="1.0.0")

    origins = parse_origins(os.getenv("CORS_ORIGINS", "*"))
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Browsers reject "*" with credentials
        allow_credentials=origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    store = JsonFileStore(settings.data_file, settings.backups_dir, keep=settings.backup_keep)
    renderer = DetailPageRenderer(settings.pages_dir, settings.pages_base_path)
    app.include_router(build_router(store, renderer, settings.grouped_file))

    @app.get("/health")
    def health():
        return {"status": "ok", "service": "course-service", "data_file": str(settings.data_file)}

    logger.info("Serving courses from %s", settings.data_file)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=get_int("PORT", 8001))
