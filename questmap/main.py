"""FastAPI application entry point."""
import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from questmap import __version__
from questmap.config import get_settings
from questmap.core import combat_storage
from questmap.middleware.error_handler import setup_error_handlers

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("questmap")

app = FastAPI(
    title="QuestMap Engine",
    description="Deterministic world generation, encounters and combat for a location-based RPG",
    version=__version__,
)


# Middleware to log ALL requests
@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception as e:
        logger.warning(f"{request.method} {request.url.path} -> {type(e).__name__}: {e}")
        raise
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f} ms)")
    return response

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        settings.FRONTEND_URL,
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",  # Vite
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


setup_error_handlers(app, debug=settings.DEBUG)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "online", "service": "QuestMap Engine", "version": __version__}


@app.get("/health")
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "world_seed": settings.WORLD_SEED,
        "active_combats": len(combat_storage.list_combat_ids()),
        "debug_mode": settings.DEBUG,
    }


# Routes
from questmap.api.routes import world, encounters, combat  # noqa: E402
app.include_router(world.router, prefix="/api/world", tags=["world"])
app.include_router(encounters.router, prefix="/api/encounters", tags=["encounters"])
app.include_router(combat.router, prefix="/api/combat", tags=["combat"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("questmap.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
