from fastapi import APIRouter

from careline.app.api.v1.endpoints.health import router as health_router
from careline.app.api.v1.endpoints.orders import router as orders_router
from careline.app.api.v1.endpoints.facilities import router as facilities_router

router = APIRouter()
router.include_router(health_router, tags=["health"])
router.include_router(orders_router, tags=["orders"])
router.include_router(facilities_router, tags=["facilities"])
