"""Device data routes (/api/data)"""
from config.logger import logger
from config.settings import RECENT_DATA_LIMIT
from context.telemetry import TelemetryContext, get_telemetry
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from models.schemas import (
    CreateReadingRequest,
    DataResponse,
    DeleteResponse,
    Reading,
    StatusResponse,
    utcnow,
)
from services.fallback import with_fallback
from services.storage import make_reading, mock_id

router = APIRouter(prefix="/api/data", tags=["device data"])


@router.post("", status_code=201, response_model=Reading)
async def create_device_data(
    payload: CreateReadingRequest,
    telemetry: TelemetryContext = Depends(get_telemetry),
):
    """Store a new reading (in memory if the database is unavailable)"""
    device_id = (payload.device_id or "").strip()
    if not device_id or payload.temperature is None or payload.humidity is None:
        return JSONResponse(status_code=400, content={"message": "Please provide all required fields"})

    # Creating data for a deleted device brings it back
    if telemetry.store.reactivate(device_id):
        logger.info(f"Device {device_id} reactivated")

    now = utcnow()
    fallback_record = make_reading(mock_id(), device_id, payload.temperature, payload.humidity, now)
    reading = await with_fallback(
        telemetry.repository.create(device_id, payload.temperature, payload.humidity, now),
        fallback_record,
    )
    if reading is fallback_record:
        telemetry.store.add(reading)

    telemetry.last_updated = now
    return reading


@router.get("/latest", response_model=DataResponse)
async def get_latest_device_data(telemetry: TelemetryContext = Depends(get_telemetry)):
    """Latest reading for each device"""
    data = await with_fallback(
        telemetry.repository.aggregate_latest(),
        telemetry.store.latest_per_device(),
    )
    return {"lastUpdated": telemetry.last_updated, "data": data}


@router.get("/status", response_model=StatusResponse)
async def get_simulation_status(telemetry: TelemetryContext = Depends(get_telemetry)):
    """Simulation status and last updated time"""
    return {
        "simulationActive": telemetry.generator.running,
        "lastUpdated": telemetry.last_updated,
        "devices": telemetry.store.active_devices(),
        "deletedDevices": sorted(telemetry.store.deleted_devices),
        "updateInterval": telemetry.update_interval_ms,
    }


@router.get("", response_model=DataResponse)
async def get_all_device_data(telemetry: TelemetryContext = Depends(get_telemetry)):
    """Most recent readings across all devices"""
    data = await with_fallback(
        telemetry.repository.find_recent(RECENT_DATA_LIMIT),
        telemetry.store.all_sorted(),
    )
    return {"lastUpdated": telemetry.last_updated, "data": data}


@router.delete("")
async def delete_without_device_id():
    return JSONResponse(status_code=400, content={"success": False, "message": "Please provide a device ID"})


@router.delete("/{device_id}", response_model=DeleteResponse, responses={404: {"description": "No data for device"}})
async def delete_device_data(device_id: str, telemetry: TelemetryContext = Depends(get_telemetry)):
    """Delete all data of a device and stop generating data for it"""
    device_id = device_id.strip()
    if not device_id:
        return await delete_without_device_id()

    telemetry.store.mark_deleted(device_id)

    db_deleted = await with_fallback(telemetry.repository.delete_many(device_id), 0)
    memory_deleted = telemetry.store.delete_device(device_id)

    # Rows mirrored in both stores are counted once
    deleted_count = db_deleted or memory_deleted
    if deleted_count == 0:
        return JSONResponse(
            status_code=404,
            content={"success": False, "message": f"No data found for device: {device_id}"},
        )

    active_devices = telemetry.store.active_devices()
    logger.info(f"Deleted device {device_id} - removed {deleted_count} records")
    logger.info(f"Active devices after deletion: {', '.join(active_devices) or 'none'}")

    return {
        "success": True,
        "message": f"Successfully deleted all data for device: {device_id}",
        "deletedCount": deleted_count,
        "activeDevices": active_devices,
    }
