from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shinytracker.api import health_router, hunts_router, pokemon_router, stats_router
from shinytracker.config import settings
from shinytracker.db.database import init_db


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Create the hunt table on startup."""
    await init_db()
    yield


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("shinytracker"),
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(hunts_router)
app.include_router(pokemon_router)
app.include_router(stats_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
