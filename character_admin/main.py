# main.py - Character admin API (FastAPI)
# - Endpoints: /health, /api/meta/races, /api/characters (+ create/update/delete), /api/images/ingest
# - Serves /images/<file> from the images folder and the admin UI (if built) at /
# - Middleware: API key, request-size limit, JSON access log; Prometheus /metrics

import logging
from dataclasses import asdict
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from prometheus_fastapi_instrumentator import Instrumentator

from .settings import settings
from .errors import InvalidInput, NotFound, PartialRename, RecordStoreError
from .maintenance import ingest_directory
from .metrics import character_records_deleted_total, character_records_renamed_total
from .races import RACES
from .records import RecordStore
from .middleware.api_key import APIKeyMiddleware
from .middleware.logging import LoggingMiddleware
from .middleware.max_size import MaxSizeMiddleware
from .models import (
    CharacterItem,
    CharacterList,
    CreateRequest,
    CreateResponse,
    DeleteRequest,
    IngestResponse,
    OkResponse,
    RacesResponse,
    UpdateRequest,
    UpdateResponse,
)

# ------------------------------------------------------------------------------
# Logging & Globals
# ------------------------------------------------------------------------------
logger = logging.getLogger(__name__)


def get_store() -> RecordStore:
    """A store over the configured folders; built per request so settings changes apply."""
    return RecordStore(
        settings.content_dir,
        settings.images_dir,
        webp_quality=settings.webp_quality,
        webp_method=settings.webp_method,
    )


# ------------------------------------------------------------------------------
# FastAPI app & middleware wiring
# ------------------------------------------------------------------------------
app = FastAPI(
    title="Character Admin",
    description="Local admin API for character markdown records and their images.",
    version="0.1.0",
)

# CORS for the Astro dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:4321"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(APIKeyMiddleware)
app.add_middleware(MaxSizeMiddleware, max_bytes=settings.max_bytes)
app.add_middleware(LoggingMiddleware)

# Prometheus /metrics
Instrumentator().instrument(app).expose(app)


# ==============================================================================
# Error mapping
# ==============================================================================

def _status_for(exc: RecordStoreError) -> int:
    if isinstance(exc, NotFound):
        return 404
    if isinstance(exc, InvalidInput):
        return 400
    return 500


@app.exception_handler(RecordStoreError)
async def record_store_error(request: Request, exc: RecordStoreError):
    status = _status_for(exc)
    if status < 500:
        logger.warning(f"{request.method} {request.url.path}: {exc}")
    elif isinstance(exc, PartialRename):
        logger.error(f"Partial rename, manual cleanup needed: completed={list(exc.completed)}", exc_info=exc)
    else:
        logger.error(f"{request.method} {request.url.path} failed", exc_info=exc)
    return JSONResponse(status_code=status, content={"ok": False, "error": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_error(request: Request, exc: RequestValidationError):
    problems = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', 'invalid')}"
        for err in exc.errors()
    )
    logger.warning(f"{request.method} {request.url.path}: invalid request ({problems})")
    return JSONResponse(status_code=422, content={"ok": False, "error": f"Invalid request: {problems}"})


# Anything unexpected still answers in the API's JSON shape
@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    logger.error(f"{request.method} {request.url.path} failed unexpectedly", exc_info=exc)
    return JSONResponse(status_code=500, content={"ok": False, "error": str(exc) or type(exc).__name__})


# ==============================================================================
# Routes
# ==============================================================================

@app.get("/health")
async def health():
    return {
        "status": "ok",
        "content_dir": settings.content_dir,
        "images_dir": settings.images_dir,
    }


@app.get("/api/meta/races", response_model=RacesResponse)
async def races():
    return RacesResponse(races=RACES)


@app.get("/api/characters", response_model=CharacterList)
async def list_characters():
    records = await run_in_threadpool(get_store().list)
    return CharacterList(items=[CharacterItem.from_record(r) for r in records])


@app.post("/api/characters/create", response_model=CreateResponse)
async def create_character(req: CreateRequest):
    slug = await run_in_threadpool(get_store().create, req.fields(), req.base)
    return CreateResponse(base=slug)


@app.post("/api/characters/update", response_model=UpdateResponse)
async def update_character(req: UpdateRequest):
    if not req.original_base:
        raise InvalidInput("originalBase is required")
    slug = await run_in_threadpool(get_store().update, req.original_base, req.fields())
    character_records_renamed_total.labels(slug_changed=str(slug != req.original_base).lower()).inc()
    return UpdateResponse(updated_base=slug)


# Removes the markdown and the matching image, whichever exist
@app.post("/api/characters/delete", response_model=OkResponse)
async def delete_character(req: DeleteRequest):
    if not req.base:
        raise InvalidInput("base is required")
    await run_in_threadpool(get_store().delete, req.base)
    character_records_deleted_total.inc()
    return OkResponse()


@app.post("/api/images/ingest", response_model=IngestResponse)
async def ingest_images():
    report = await run_in_threadpool(ingest_directory, get_store(), settings.raw_images_dir)
    return IngestResponse(
        ok=report.ok,
        found=report.found,
        ingested=report.ingested,
        failed=[asdict(f) for f in report.failed],
    )


@app.get("/images/{filename}")
async def image(filename: str):
    images_dir = Path(settings.images_dir).resolve()
    path = (images_dir / filename).resolve()
    if path.parent != images_dir or not path.is_file():
        return JSONResponse(status_code=404, content={"ok": False, "error": "image not found"})
    return FileResponse(path)


# Admin UI last, so it never shadows the API routes
if Path(settings.admin_ui_dir).is_dir():
    app.mount("/", StaticFiles(directory=settings.admin_ui_dir, html=True), name="admin")


def run() -> None:
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")
    logger.info(f"Admin UI running at http://localhost:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
