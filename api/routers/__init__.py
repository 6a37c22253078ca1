"""
Router package for the RtF Progression API.

This package contains all API routers organized by domain:
- health: Health check endpoint
- rtf: Week goals, timeline, forecast and program setup
- tm_events: Training-Max adjustment ledger
- workouts: Workout sessions and set logs
- metrics: Prometheus scrape endpoint
"""

from api.routers.health import router as health_router
from api.routers.rtf import router as rtf_router
from api.routers.tm_events import router as tm_events_router
from api.routers.workouts import router as workouts_router
from api.routers.metrics import router as metrics_router

__all__ = [
    "health_router",
    "rtf_router",
    "tm_events_router",
    "workouts_router",
    "metrics_router",
]
