import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config import settings
from routers.catalog import router as catalog_router
from routers.exports import router as exports_router
from routers.imports import router as imports_router
from routers.inventory import router as inventory_router
from routers.tanks import router as tanks_router

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("%s starting (CORS origins: %s)", settings.app_name, ", ".join(settings.cors_origins))
    yield


app = FastAPI(
    title=settings.app_name,
    description="Tank planning, stock moves and stock reports for a brewery",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}


# Fermentation tanks
app.include_router(tanks_router, prefix="/tanks", tags=["tanks"])

# Warehouse stock
app.include_router(inventory_router, prefix="/inventory", tags=["inventory"])
app.include_router(catalog_router, prefix="/catalog", tags=["catalog"])

# Spreadsheets
app.include_router(exports_router, prefix="/exports", tags=["exports"])
app.include_router(imports_router, prefix="/imports", tags=["imports"])

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
