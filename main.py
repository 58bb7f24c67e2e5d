# main.py
"""
FastAPI entry point for PantryChef.
Startup/readiness checks against the configured store, request-id middleware
with structured request logging, and JSON mapping of application errors.
"""
import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from typing import Dict, Optional

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pantrychef import __version__
from pantrychef.api.catalog import router as catalog_router
from pantrychef.api.pantry import router as pantry_router
from pantrychef.api.recommendations import router as recommendations_router
from pantrychef.api.restrictions import router as restrictions_router
from pantrychef.config.settings import settings
from pantrychef.exceptions import PantryChefError
from pantrychef.stores import get_store
from pantrychef.stores.sql_store import SqlStore

logger = logging.getLogger("uvicorn.error")


async def _run_sync_in_executor(fn, *args, timeout: Optional[float] = None):
    """
    Run a blocking function in the default threadpool with a timeout.
    Returns the function's result or raises TimeoutError.
    """
    timeout = settings.health_check_timeout if timeout is None else timeout
    return await asyncio.wait_for(asyncio.to_thread(fn, *args), timeout=timeout)


async def _store_healthy(timeout: Optional[float] = None) -> bool:
    store = get_store()
    try:
        return bool(await _run_sync_in_executor(store.health_check, timeout=timeout))
    except asyncio.TimeoutError:
        logger.warning("Store health_check timed out (backend=%s)", store.backend_name)
    except Exception as exc:
        logger.exception("Unexpected error calling store.health_check: %s", exc)
    return False


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting PantryChef (backend=%s)...", settings.storage_backend)

    store = get_store()
    if isinstance(store, SqlStore) and settings.create_schema_on_startup:
        await _run_sync_in_executor(store.create_schema)

    app.state.store_healthy = await _store_healthy()
    logger.info("Store health: %s", app.state.store_healthy)

    if not app.state.store_healthy and settings.fail_on_db_startup:
        logger.error("FAIL_ON_DB_STARTUP enabled and store unhealthy. Aborting startup.")
        raise RuntimeError("Store unhealthy on startup")

    yield
    logger.info("Shutting down PantryChef...")


app = FastAPI(
    title="PantryChef",
    description="Recipe recommendations ranked by how much of each recipe your pantry already covers",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_request_id_and_log(request: Request, call_next):
    request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
    request.state.request_id = request_id
    logger.info("Incoming request %s %s id=%s", request.method, request.url.path, request_id)
    try:
        response: Response = await call_next(request)
    except Exception as exc:
        logger.exception("Handler error for request id=%s: %s", request_id, exc)
        return JSONResponse(
            {"ok": False, "status": 500, "message": "Internal server error"},
            status_code=500,
            headers={"X-Request-Id": request_id},
        )
    logger.info("Completed request id=%s status=%s", request_id, response.status_code)
    response.headers["X-Request-Id"] = request_id
    return response


@app.exception_handler(PantryChefError)
async def pantrychef_error_handler(request: Request, exc: PantryChefError):
    if exc.status_code >= 500:
        logger.error("%s on %s: %s", exc.code, request.url.path, exc)
    return JSONResponse(
        {
            "ok": False,
            "status": exc.status_code,
            "error": exc.code,
            "message": str(exc),
            "diagnostics": exc.diagnostics,
        },
        status_code=exc.status_code,
    )


app.include_router(catalog_router, prefix="/api", tags=["catalog"])
app.include_router(recommendations_router, prefix="/api/recommendations", tags=["recommendations"])
app.include_router(pantry_router, prefix="/api/pantry", tags=["pantry"])
app.include_router(restrictions_router, prefix="/api/restrictions", tags=["restrictions"])


@app.get("/")
async def root() -> Dict[str, str]:
    return {"message": "PantryChef is running!", "status": "healthy"}


@app.get("/health")
async def health_check():
    """
    Liveness plus a bounded store check. Returns 503 (degraded) when the
    store is unreachable instead of failing hard.
    """
    db_ok = await _store_healthy()
    return JSONResponse(
        {
            "status": "healthy" if db_ok else "degraded",
            "service": "pantrychef",
            "database": "connected" if db_ok else "disconnected",
            "storage": get_store().diagnostics(),
        },
        status_code=200 if db_ok else 503,
    )


@app.get("/ready")
async def readiness_check():
    """Readiness from the cached startup state; one bounded check if never set."""
    store_state: Optional[bool] = getattr(app.state, "store_healthy", None)
    if store_state is None:
        store_state = await _store_healthy(timeout=2.0)

    if store_state:
        return JSONResponse({"ready": True, "database": "connected"}, status_code=200)
    return JSONResponse({"ready": False, "database": "disconnected"}, status_code=503)


if __name__ == "__main__":
    import os

    import uvicorn

    uvicorn.run("main:app", host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", 5000)), reload=True)
