"""API routes"""
from config.settings import APP_ENV
from context.telemetry import TelemetryContext, get_telemetry
from fastapi import APIRouter, Depends
from models.schemas import ApiInfoResponse, HealthResponse, utcnow

router = APIRouter()

ENDPOINTS = [
    {"method": "GET", "path": "/api/data", "description": "Get all device data"},
    {"method": "GET", "path": "/api/data/latest", "description": "Get latest data for each device"},
    {"method": "GET", "path": "/api/data/status", "description": "Get simulation status"},
    {"method": "POST", "path": "/api/data", "description": "Add new device data"},
    {"method": "DELETE", "path": "/api/data/{deviceId}", "description": "Delete all data for a device"},
]


@router.get("/", response_model=ApiInfoResponse)
async def home():
    """API info endpoint"""
    return {
        "message": "API is running",
        "status": "ok",
        "environment": APP_ENV,
        "endpoints": ENDPOINTS,
    }


@router.get("/health", response_model=HealthResponse)
async def health(telemetry: TelemetryContext = Depends(get_telemetry)):
    """Health check endpoint"""
    return {
        "status": "ok",
        "timestamp": utcnow(),
        "persistence": telemetry.persistence_status,
        "bufferSize": len(telemetry.store),
    }
