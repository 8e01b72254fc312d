import asyncio

from sqlalchemy.ext.asyncio import AsyncSession

from app.features.identity.services.identity_provider import (
    IdentityProvider,
    user_ids_with_role,
)
from app.features.notifications.schemas.order_notification import OrderNotificationRequest
from app.platform.config import Settings
from app.platform.exceptions import (
    EmailDeliveryError,
    IdentityProviderError,
    OrderNotificationError,
    StoreReadError,
)
from app.platform.logger import get_logger
from app.platform.services.email import EmailClient, render_template

logger = get_logger(__name__)


class OrderNotificationService:
    def __init__(
        self,
        db: AsyncSession,
        settings: Settings,
        email_client: EmailClient,
        identity: IdentityProvider,
    ):
        self.db = db
        self.settings = settings
        self.email_client = email_client
        self.identity = identity

    async def admin_emails(self) -> list[str]:
        try:
            admin_ids = set(await user_ids_with_role(self.db, self.settings.ADMIN_ROLE))
        except StoreReadError as e:
            raise OrderNotificationError("Failed to fetch admin emails") from e

        if not admin_ids:
            return []

        try:
            users = await self.identity.list_users()
        except IdentityProviderError as e:
            raise OrderNotificationError("Failed to fetch admin user details") from e

        return [user["email"] for user in users if user.get("id") in admin_ids and user.get("email")]

    def render_order(self, request: OrderNotificationRequest) -> str:
        details = request.order_details
        return render_template(
            "order_confirmation.html",
            store_name=self.settings.STORE_FROM_NAME,
            order_id=request.order_id,
            items=details.items,
            total=details.total,
            phone=details.phone,
            address=details.address,
        )

    async def notify(self, request: OrderNotificationRequest) -> int:
        """Email the order to the customer and to every admin. Returns the number of emails sent."""
        logger.info(f"Processing order notification for order: {request.order_id}")

        admin_emails = await self.admin_emails()
        logger.info(f"Found admin emails: {len(admin_emails)}")

        order_html = self.render_order(request)
        admin_html = render_template(
            "admin_order_notification.html",
            customer_email=request.customer_email,
            order_html=order_html,
        )
        from_name = self.settings.STORE_FROM_NAME

        deliveries = [
            self.email_client.send(
                request.customer_email,
                f"Order Confirmation - {request.order_id}",
                order_html,
                from_name=from_name,
            )
        ]
        deliveries.extend(
            self.email_client.send(
                admin_email,
                f"New Order Received - {request.order_id}",
                admin_html,
                from_name=from_name,
            )
            for admin_email in admin_emails
        )

        # every send runs to completion before the request fails
        results = await asyncio.gather(*deliveries, return_exceptions=True)
        failures = [result for result in results if isinstance(result, Exception)]
        for failure in failures:
            logger.error(f"Order notification email failed for order {request.order_id}: {failure}")

        if failures:
            first = failures[0]
            if isinstance(first, EmailDeliveryError):
                raise OrderNotificationError("Failed to send order notifications") from first
            raise first

        logger.info("All order notification emails sent successfully")
        return len(deliveries)
