"""DTOs and schemas for device data"""
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime"""
    return datetime.now(timezone.utc)


class Reading(BaseModel):
    """One timestamped temperature/humidity sample for a device"""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    device_id: str = Field(alias="deviceId")
    temperature: float
    humidity: float
    timestamp: datetime
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")


class CreateReadingRequest(BaseModel):
    """Body of POST /api/data (fields are validated by the handler)"""
    # Numeric device ids are stored as text, infinite/NaN readings are refused
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True, allow_inf_nan=False)

    device_id: Optional[str] = Field(default=None, alias="deviceId")
    temperature: Optional[float] = None
    humidity: Optional[float] = None


class DataResponse(BaseModel):
    """Schema for list/latest responses"""
    model_config = ConfigDict(populate_by_name=True)

    last_updated: datetime = Field(alias="lastUpdated")
    data: list[Reading]


class StatusResponse(BaseModel):
    """Schema for simulation status"""
    model_config = ConfigDict(populate_by_name=True)

    simulation_active: bool = Field(alias="simulationActive")
    last_updated: datetime = Field(alias="lastUpdated")
    devices: list[str]
    deleted_devices: list[str] = Field(alias="deletedDevices")
    update_interval: int = Field(alias="updateInterval")


class DeleteResponse(BaseModel):
    """Schema for a successful device deletion"""
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: str
    deleted_count: int = Field(alias="deletedCount")
    active_devices: list[str] = Field(alias="activeDevices")


class EndpointInfo(BaseModel):
    method: str
    path: str
    description: str


class ApiInfoResponse(BaseModel):
    """Schema for API info"""
    message: str
    status: str
    environment: str
    endpoints: list[EndpointInfo]


class HealthResponse(BaseModel):
    """Schema for health check"""
    model_config = ConfigDict(populate_by_name=True)

    status: str
    timestamp: datetime
    persistence: str
    buffer_size: int = Field(alias="bufferSize")
