from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.admin_pin.schemas.admin_pin import (
    SendAdminPinRequest,
    SendAdminPinResponse,
    VerifyAdminPinRequest,
    VerifyAdminPinResponse,
)
from app.features.admin_pin.services.admin_pin import AdminPinService
from app.features.identity.services.identity_provider import (
    IdentityProvider,
    get_identity_provider,
)
from app.platform.config import Settings, get_settings
from app.platform.db.session import get_db
from app.platform.response import api_response
from app.platform.services.email import EmailClient, get_email_client

router = APIRouter(tags=["Admin - PIN Login"])


def get_admin_pin_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    email_client: EmailClient = Depends(get_email_client),
    identity: IdentityProvider = Depends(get_identity_provider),
) -> AdminPinService:
    return AdminPinService(db, settings, email_client, identity)


@router.options("/send-admin-pin", include_in_schema=False)
@router.options("/verify-admin-pin", include_in_schema=False)
async def admin_pin_preflight():
    return Response(status_code=status.HTTP_200_OK)


@router.post(
    "/send-admin-pin",
    response_model=SendAdminPinResponse,
    summary="Email a one-time admin login PIN",
)
async def send_admin_pin(
    payload: SendAdminPinRequest,
    service: AdminPinService = Depends(get_admin_pin_service),
):
    """
    Generate a 4-digit PIN valid for 10 minutes, replacing any outstanding
    PIN for the address, and email it. The PIN is never returned.
    """
    await service.issue_pin(payload.email)

    return api_response(message="PIN sent successfully", status_code=status.HTTP_200_OK)


@router.post(
    "/verify-admin-pin",
    response_model=VerifyAdminPinResponse,
    summary="Exchange an admin login PIN for a magic-link session artifact",
)
async def verify_admin_pin(
    payload: VerifyAdminPinRequest,
    service: AdminPinService = Depends(get_admin_pin_service),
):
    session = await service.verify_pin(payload.email, payload.pin)

    return api_response(
        data={"session": session},
        message="PIN verified successfully",
        status_code=status.HTTP_200_OK,
    )
