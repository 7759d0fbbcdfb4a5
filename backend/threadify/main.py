import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from fastapi.responses import RedirectResponse
from .settings import settings
from .routers import health
from .routers import session
from .routers import speech
from .routers import saved

logging.basicConfig(
	level=settings.log_level.upper(),
	format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parents[2]
FRONTEND_DIR = BASE_DIR / "frontend"

app = FastAPI(title="Threadify API")
app.include_router(health.router)
app.include_router(session.router)
app.include_router(speech.router)
app.include_router(saved.router)

# Static page at /app (absolute path so cwd doesn't matter when launching)
if FRONTEND_DIR.is_dir():
	app.mount("/app", StaticFiles(directory=FRONTEND_DIR, html=True), name="frontend")
else:
	logger.warning("Frontend directory %s not found; serving the API only", FRONTEND_DIR)

@app.get("/", include_in_schema=False)
async def redirect_root_to_app():
	return RedirectResponse(url="/app")

@app.get("/info")
def root():
	return {
		"status": "ok",
		"model": settings.anthropic_model,
		"cloud_speech_enabled": settings.cloud_speech_enabled,
	}
