from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.routers import route, geocoding
from app.core.logging_config import logger
from app.core.config import settings

app = FastAPI(
    title="Waypoint Routing API",
    version="1.0.0",
    redirect_slashes=False
)

# Configure CORS for the map frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(route.router, prefix="/api/route", tags=["Routing"])
app.include_router(geocoding.router, prefix="/api/geocode", tags=["Geocoding"])

logger.info(f"Waypoint routing API started (environment={settings.ENVIRONMENT})")


@app.get("/health")
async def health_check():
    return {
        "status": "healthy"
    }
