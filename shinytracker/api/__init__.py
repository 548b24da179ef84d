from shinytracker.api.health import router as health_router
from shinytracker.api.hunts import router as hunts_router
from shinytracker.api.pokemon import router as pokemon_router
from shinytracker.api.stats import router as stats_router

__all__ = [
    "health_router",
    "hunts_router",
    "pokemon_router",
    "stats_router",
]
