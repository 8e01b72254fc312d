from datetime import datetime, timedelta
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.admin_pin.services.pin_store import PinStore
from app.features.admin_pin.utils.pin import generate_pin, is_valid_pin, normalize_email
from app.features.identity.services.identity_provider import IdentityProvider
from app.platform.config import Settings
from app.platform.db.base import utc_now
from app.platform.exceptions import (
    AuthenticationFailed,
    InvalidInput,
    StoreReadError,
    StoreWriteError,
)
from app.platform.logger import get_logger
from app.platform.services.email import EmailClient, render_template

logger = get_logger(__name__)

PIN_EMAIL_SUBJECT = "Your Admin Login PIN"


class AdminPinService:
    """
    Email-based admin login: issue a one-time 4-digit PIN, then exchange it
    for a magic-link artifact.

    Proving control of an email address is all this does; whether that
    address holds the admin role is checked by the caller.
    """

    def __init__(
        self,
        db: AsyncSession,
        settings: Settings,
        email_client: EmailClient,
        identity: IdentityProvider,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.db = db
        self.settings = settings
        self.email_client = email_client
        self.identity = identity
        self.clock = clock
        self.store = PinStore(db)

    async def issue_pin(self, email: str) -> None:
        if not email or not isinstance(email, str):
            raise InvalidInput("Valid email is required")

        email = normalize_email(email)
        logger.info(f"Sending PIN to email: {email}")

        try:
            await self.store.delete_for_email(email)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.warning(f"Could not clear previous PINs for {email}: {str(e)}")

        ttl_minutes = self.settings.ADMIN_PIN_TTL_MINUTES
        pin = generate_pin()
        expires_at = self.clock() + timedelta(minutes=ttl_minutes)

        try:
            await self.store.create(email, pin, expires_at)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error storing PIN: {str(e)}")
            raise StoreWriteError("Failed to store PIN") from e

        # The row stays committed if delivery fails; re-issuing replaces it.
        html = render_template("admin_pin.html", pin=pin, expiration_minutes=ttl_minutes)
        await self.email_client.send(
            email, PIN_EMAIL_SUBJECT, html, from_name=self.settings.ADMIN_PIN_FROM_NAME
        )

        logger.info("PIN sent successfully")

    async def verify_pin(self, email: str, pin: str) -> dict:
        if not email or not pin:
            raise InvalidInput("Email and PIN are required")
        if not is_valid_pin(pin):
            raise InvalidInput("PIN must be exactly 4 digits")

        email = normalize_email(email)
        logger.info(f"Verifying PIN for email: {email}")

        try:
            pin_id = await self.store.consume(email, pin, self.clock())
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error checking PIN: {str(e)}")
            raise StoreReadError("Failed to verify PIN") from e

        if pin_id is None:
            logger.info("Invalid or expired PIN")
            raise AuthenticationFailed("Invalid or expired PIN")

        await self._ensure_identity(email)
        session = await self.identity.generate_magic_link(email)

        logger.info("PIN verified successfully")
        return session

    async def _ensure_identity(self, email: str) -> None:
        existing_user = await self.identity.find_user_by_email(email)
        if existing_user:
            return

        new_user = await self.identity.create_user(
            email, user_metadata={"full_name": self.settings.ADMIN_DEFAULT_FULL_NAME}
        )
        logger.info(f"New user created: {new_user.get('id')}")
