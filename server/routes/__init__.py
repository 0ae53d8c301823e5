from routes.api import router as api_router
from routes.device_data import router as device_data_router

__all__ = ["api_router", "device_data_router"]
