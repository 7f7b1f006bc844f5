from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import alerts, diagnostics, monitoring, weather
from .api.deps import get_rain_monitor
from .core.config import settings
from .domain.services.monitor import RainMonitor, get_monitor
from .domain.services.scheduler import start_scheduler, stop_scheduler
from .domain.zones import zone_names

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def log_config_status():
    """Log which providers and channels are configured on startup."""
    status = get_monitor().get_status()["config_status"]
    enabled = [name for name, ok in status.items() if ok]
    disabled = [name for name, ok in status.items() if not ok]
    logger.info(f"Configured: {enabled or 'nothing'}; not configured: {disabled or 'nothing'}")

    if not any(status.get(s) for s in ("open_meteo", "openweather", "weatherapi", "meteomatics")):
        logger.warning("No weather providers enabled - every zone will report 'No Data'")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan events for startup and shutdown."""
    # Startup
    logger.info(f"🚀 Starting {settings.PROJECT_NAME}...")
    logger.info(f"🌧️ Monitoring {len(zone_names())} Mumbai zones")
    logger.info(f"🎯 Rain alert threshold: ≥{settings.RAIN_ALERT_THRESHOLD_MM:g}mm")
    log_config_status()

    start_scheduler()

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.PROJECT_NAME}...")
    stop_scheduler()


app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(weather.router, prefix=settings.API_V1_STR, tags=["weather"])
app.include_router(alerts.router, prefix=settings.API_V1_STR, tags=["alerts"])
app.include_router(monitoring.router, prefix=settings.API_V1_STR, tags=["monitoring"])
app.include_router(diagnostics.router, prefix=settings.API_V1_STR, tags=["diagnostics"])


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error(f"API Error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error", "message": str(exc)},
    )


@app.get("/")
def root(monitor: RainMonitor = Depends(get_rain_monitor)):
    return {
        "message": f"🌧️ {settings.PROJECT_NAME} is LIVE!",
        "status": "running",
        "monitoring": monitor.state.active,
        "season": (
            f"Active ({monitor.season_label()})" if monitor.in_season()
            else f"Inactive ({monitor.off_season_label()})"
        ),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "zones": zone_names(),
        "last_update": monitor.state.last_update_at.isoformat() if monitor.state.last_update_at else None,
    }


@app.get("/health")
def health_check(monitor: RainMonitor = Depends(get_rain_monitor)):
    return {"status": "healthy", "monitoring": monitor.state.active}
