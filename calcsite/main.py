from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from .config import settings
from .routers import calculators, catalog, contact

logger = logging.getLogger("calcsite")

app = FastAPI(
    title="Calculator Site",
    description="Financial, health, math, date and everyday calculators",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.CORS_ORIGINS.split(",") if origin.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(calculators.router, prefix="/api")
app.include_router(catalog.router, prefix="/api")
app.include_router(contact.router, prefix="/api")

logger.info("%s ready", settings.APP_NAME)


@app.get("/health")
def health():
    return {"status": "ok", "app": settings.APP_NAME}
