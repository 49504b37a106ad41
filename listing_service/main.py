# listing_service/main.py
import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from catalog_engine import CatalogLoader
from shared.config import get_env, get_float, get_int, get_list, parse_origins
from .catalog import CatalogCache
from .routes import build_router

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger("listing-service")


def loader_from_env() -> CatalogLoader:
    course_service = get_env("COURSE_SERVICE_URL", "http://localhost:8001").rstrip("/")
    return CatalogLoader(
        source_urls=get_list("CATALOG_SOURCE_URLS", f"{course_service}/courses/"),
        grouped_urls=get_list("CATALOG_GROUPED_URLS", f"{course_service}/courses/grouped"),
        inline_file=os.getenv("CATALOG_INLINE_FILE") or None,
        timeout=get_float("CATALOG_TIMEOUT", 10.0),
    )


def create_app(loader: CatalogLoader | None = None) -> FastAPI:
    loader = loader or loader_from_env()

    app = FastAPI(title="Listing Service", version="1.0.0")

    origins = parse_origins(os.getenv("CORS_ORIGINS", "*"))
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Browsers reject "*" with credentials
        allow_credentials=origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(build_router(CatalogCache(loader)))

    @app.get("/health")
    def health():
        return {"status": "ok", "service": "listing-service", "sources": loader.source_urls + loader.grouped_urls}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=get_int("PORT", 8002))
