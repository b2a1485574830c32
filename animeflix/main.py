import json
import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from animeflix.api.anime.router import router as anime_router
from animeflix.api.anime.service import AnimeService
from animeflix.api.health.router import router as health_router
from animeflix.api.manga.router import router as manga_router
from animeflix.api.manga.service import MangaService
from animeflix.core.config import Settings, settings as default_settings
from animeflix.core.errors import AnimeflixError
from animeflix.parsers.base import AnimeProvider, MangaProvider
from animeflix.parsers.registry import build_anime_provider, build_manga_provider

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Route not found :("


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"{app.title} запущен")
    yield
    for provider in (app.state.anime_service.provider, app.state.manga_service.provider):
        await provider.aclose()
    logger.info(f"{app.title} остановлен")


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AnimeflixError)
    async def animeflix_error_handler(request: Request, exc: AnimeflixError):
        logger.info(f"{exc.name} on {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.info(f"Validation error on {request.url.path}: {exc.errors()}")
        message = "; ".join(
            f"{'.'.join(str(loc) for loc in e['loc'])}: {e['msg']}" for e in exc.errors()
        )
        return JSONResponse(status_code=400, content={"name": "ValidationError", "message": message})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return PlainTextResponse(NOT_FOUND_MESSAGE, status_code=404)
        return JSONResponse(
            status_code=exc.status_code,
            content={"name": "HTTPException", "message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unexpected error on {request.url.path}: {str(exc)}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"name": "InternalServerError", "message": "Internal server error"}
        )


def create_app(settings: Optional[Settings] = None,
               anime_provider: Optional[AnimeProvider] = None,
               manga_provider: Optional[MangaProvider] = None) -> FastAPI:
    """
    Собирает приложение.

    Провайдеры и сервисы создаются один раз здесь и живут в app.state,
    в тестах вместо них передаются заглушки.
    """
    settings = settings or default_settings

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="REST API specification for Animeflix - A simple anime and manga streaming service",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    app.state.anime_service = AnimeService(
        anime_provider or build_anime_provider(settings),
        strict_pages=settings.STRICT_PAGE_PARSING,
    )
    app.state.manga_service = MangaService(
        manga_provider or build_manga_provider(settings),
        page_size=settings.MANGA_PAGE_SIZE,
        strict_pages=settings.STRICT_PAGE_PARSING,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f} ms)")
        return response

    app.include_router(anime_router)
    app.include_router(manga_router)
    app.include_router(health_router)

    @app.get("/", tags=["Default"])
    async def root():
        return {
            "status": "ok",
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "docs": app.docs_url,
        }

    register_error_handlers(app)

    return app


def dump_openapi(app: FastAPI, path: str) -> None:
    with open(path, "w") as f:
        json.dump(app.openapi(), f, indent=2)
    logger.info(f"OpenAPI schema written to {path}")


logging.basicConfig(level=default_settings.LOG_LEVEL)

app = create_app()

if default_settings.OPENAPI_PATH:
    dump_openapi(app, default_settings.OPENAPI_PATH)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=default_settings.HOST,
        port=default_settings.PORT,
        log_level=default_settings.LOG_LEVEL.lower(),
    )
