from pathlib import Path
from typing import Optional

import httpx
from fastapi import Depends
from jinja2 import Environment, FileSystemLoader, select_autoescape

from app.platform.config import Settings, get_settings
from app.platform.exceptions import EmailDeliveryError
from app.platform.logger import get_logger

logger = get_logger("email_service")

template_dir = Path(__file__).resolve().parent.parent.parent / "templates"

env = Environment(
    loader=FileSystemLoader(str(template_dir)),
    autoescape=select_autoescape(["html"]),
)


def format_rand(value) -> str:
    return f"R{float(value):.2f}"


env.filters["rand"] = format_rand


def render_template(name: str, **context) -> str:
    return env.get_template(name).render(**context)


class EmailClient:
    """Sends transactional email through the Resend HTTP API."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._transport = transport

    def _sender(self, from_name: Optional[str]) -> str:
        if from_name:
            return f"{from_name} <{self.settings.MAIL_FROM_ADDRESS}>"
        return self.settings.MAIL_FROM_ADDRESS

    async def send(
        self, to_email: str, subject: str, html: str, from_name: Optional[str] = None
    ) -> dict:
        if not self.settings.RESEND_API_KEY:
            logger.error("Email provider is not configured (RESEND_API_KEY missing)")
            raise EmailDeliveryError()

        payload = {
            "from": self._sender(from_name),
            "to": [to_email],
            "subject": subject,
            "html": html,
        }
        headers = {
            "Authorization": f"Bearer {self.settings.RESEND_API_KEY}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.EMAIL_TIMEOUT, transport=self._transport
            ) as client:
                response = await client.post(
                    self.settings.RESEND_API_URL, json=payload, headers=headers
                )
                response.raise_for_status()

        except httpx.TimeoutException as e:
            logger.error(f"Email provider timeout for {to_email}")
            raise EmailDeliveryError() from e

        except httpx.HTTPStatusError as e:
            logger.error(
                f"Email provider rejected message to {to_email}: "
                f"{e.response.status_code} {e.response.text}"
            )
            raise EmailDeliveryError() from e

        except httpx.HTTPError as e:
            logger.error(f"Email provider request failed: {str(e)}")
            raise EmailDeliveryError() from e

        result = response.json() if response.content else {}
        logger.info(f"Email sent to {to_email}: {result.get('id')}")
        return result


def get_email_client(settings: Settings = Depends(get_settings)) -> EmailClient:
    return EmailClient(settings)
