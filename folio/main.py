import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI

from folio.errors import BuildFailed, IoFailure
from folio.routers import posts
from folio.security import get_api_key
from folio.services.assembler import build_site
from folio.settings import settings

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        app.state.site = build_site()
        logger.info(f"Site built from {settings.CONTENT_DIR}")
    except (IoFailure, BuildFailed) as e:
        # Routes answer 503 until the content is fixed and the app restarted
        app.state.site = None
        logger.error(f"Site build failed for {settings.CONTENT_DIR}: {e}")

    try:
        yield
    finally:
        app.state.site = None
        logger.info("Site model released")


app = FastAPI(
    title="Folio API",
    description="Read-only view of a Markdown content site",
    lifespan=lifespan,
)

app.include_router(posts.router, dependencies=[Depends(get_api_key)])


@app.get("/")
async def root():
    return {"message": "Folio API is running"}
