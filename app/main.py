"""
Main FastAPI application for the image variation editor API.
Serves health, edit-image, variations and metrics.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.logging import configure_logging
from app.api.routes import health, edit_image
from app.utils.metrics import router as metrics_router


configure_logging()

app = FastAPI(
    title="Gemini Image Editor API",
    description="Image editing and generation through a remote multimodal model",
    version="1.0.0",
)

# CORS
origins = settings.cors_origins_list
if not origins:
    origins = ["http://localhost:3000", "http://127.0.0.1:3000"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(health.router, tags=["health"])
app.include_router(edit_image.router)
app.include_router(metrics_router)
