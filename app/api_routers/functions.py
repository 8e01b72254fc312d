from fastapi import APIRouter

from app.features.admin_pin.routes.admin_pin import router as admin_pin_router
from app.features.health.routes.health import router as health_router
from app.features.notifications.routes.order_notification import (
    router as order_notification_router,
)

api_router = APIRouter()

# Function endpoints are served at the root, matching the storefront's client paths
api_router.include_router(admin_pin_router)
api_router.include_router(order_notification_router)
api_router.include_router(health_router)
