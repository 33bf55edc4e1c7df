from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from voyage_planner.config import settings
from voyage_planner.middleware.exceptions import register_exception_handlers
from voyage_planner.routers import health, unit_types, vessels, voyages
from voyage_planner.utils.cache import close_redis


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_redis()


app = FastAPI(
    title="Voyage Planner",
    description="Voyage scheduling API for vessels, ports and cargo unit types",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Exception Handlers ───────────────────────────────────────
register_exception_handlers(app)

# ── Middleware ───────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ──────────────────────────────────────────────────
app.include_router(health.router)
app.include_router(voyages.router, prefix="/api/voyage", tags=["voyage"])
app.include_router(vessels.router, prefix="/api/vessel", tags=["vessel"])
app.include_router(unit_types.router, prefix="/api/unitType", tags=["unitType"])
