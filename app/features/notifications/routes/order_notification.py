from typing import Callable

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.routing import APIRoute
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.identity.services.identity_provider import (
    IdentityProvider,
    get_identity_provider,
)
from app.features.notifications.schemas.order_notification import (
    OrderNotificationRequest,
    OrderNotificationResponse,
)
from app.features.notifications.services.order_notification import OrderNotificationService
from app.platform.config import Settings, get_settings
from app.platform.db.session import get_db
from app.platform.exceptions import OrderNotificationError, validation_message
from app.platform.response import api_response
from app.platform.services.email import EmailClient, get_email_client


class OrderNotificationRoute(APIRoute):
    """Malformed order payloads fail with 500 like every other order-notification error."""

    def get_route_handler(self) -> Callable:
        handler = super().get_route_handler()

        async def route_handler(request: Request) -> Response:
            try:
                return await handler(request)
            except RequestValidationError as e:
                raise OrderNotificationError(validation_message(e)) from e

        return route_handler


router = APIRouter(tags=["Notifications"], route_class=OrderNotificationRoute)


def get_order_notification_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    email_client: EmailClient = Depends(get_email_client),
    identity: IdentityProvider = Depends(get_identity_provider),
) -> OrderNotificationService:
    return OrderNotificationService(db, settings, email_client, identity)


@router.options("/send-order-notification", include_in_schema=False)
async def order_notification_preflight():
    return Response(status_code=status.HTTP_200_OK)


@router.post(
    "/send-order-notification",
    response_model=OrderNotificationResponse,
    summary="Email an order confirmation to the customer and all admins",
)
async def send_order_notification(
    payload: OrderNotificationRequest,
    service: OrderNotificationService = Depends(get_order_notification_service),
):
    await service.notify(payload)

    return api_response(message="Order notifications sent", status_code=status.HTTP_200_OK)
