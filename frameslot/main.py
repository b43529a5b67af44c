# frameslot/main.py
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from concurrent.futures import ThreadPoolExecutor
import threading
import logging
import os

from frameslot.config.settings import settings
from frameslot.delivery.api.templates import router
from frameslot.domain.registry import DefinitionCache
from frameslot.domain.template_service import TemplateService

logger = logging.getLogger("uvicorn.error")

# --- Lazy service bootstrap state ---
_service_lock = threading.Lock()

def _ensure_service(app: FastAPI) -> None:
    with _service_lock:
        if getattr(app.state, "template_service", None) is not None:
            return
        logger.info("Memulai inisialisasi TemplateService (lazy-init)...")
        app.state.template_service = TemplateService(
            cache=DefinitionCache(),
            executor=app.state.executor,
        )
        logger.info("Inisialisasi service selesai.")

@asynccontextmanager
async def lifespan(app: FastAPI):
    max_workers = min(settings.MAX_WORKERS, os.cpu_count() or 1)
    app.state.executor = ThreadPoolExecutor(max_workers=max_workers)
    app.state.template_service = None
    logger.info(f"Service '{settings.PROJECT_NAME}' dimulai (mode: {settings.ENVIRONMENT}).")
    logger.info(f"Shared ThreadPoolExecutor dibuat dengan {max_workers} workers.")
    yield
    logger.info("Menutup ThreadPoolExecutor...")
    app.state.executor.shutdown(wait=True)
    logger.info("Service berhenti.")

app = FastAPI(
    title="Template Hole Detection Service",
    description="Detects photo holes in PNG print templates and returns validated template definitions",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Lazy-load only for API routes
@app.middleware("http")
async def lazy_boot(request: Request, call_next):
    if request.url.path.startswith(settings.API_V1_STR):
        _ensure_service(request.app)
    return await call_next(request)

app.include_router(router, prefix=settings.API_V1_STR)

@app.get("/")
async def root():
    return {"message": "Frameslot Template Service", "version": "1.0.0", "status": "ok"}

@app.get("/health")
async def health_check(request: Request):
    ready = getattr(request.app.state, "template_service", None) is not None
    return {"status": "ok", "service": "Frameslot 1.0", "service_ready": ready}
