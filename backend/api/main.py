"""
FastAPI application entry point.

Run with: uvicorn api.main:app --reload   (from the backend/ directory)
or:       python -m api.main              (listens on PORT, default 3000)
"""
import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse

# Load environment variables from backend/.env (optional) before other imports that read env
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(env_path)

from api.routes import guides  # noqa: E402
from db import init_db  # noqa: E402
from settings import settings  # noqa: E402

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent.parent / "static"

# Create app
app = FastAPI(
    title="Travel Guide Service",
    description="Stores travel guides, enriches their cities with pictures and coordinates, and renders them with a map",
    version="0.1.0",
)

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure properly for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(guides.router, prefix="/guide", tags=["guides"])


@app.on_event("startup")
def startup_event():
    """Initialize database tables on startup."""
    init_db()
    logger.info("Travel guide service ready (database: %s)", settings.DATABASE_URL.split("://", 1)[0])


@app.get("/", include_in_schema=False)
async def root():
    """Landing page with the guide submission form."""
    return FileResponse(STATIC_DIR / "index.html", media_type="text/html")


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


# Must stay last: catches GET /{guide_id}
app.include_router(guides.alias_router, tags=["guides"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
