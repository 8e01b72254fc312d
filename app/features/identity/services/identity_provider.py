from typing import Any, Optional, Protocol

import httpx
from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.identity.models.user_role import UserRole
from app.platform.config import Settings, get_settings
from app.platform.exceptions import IdentityProviderError, StoreReadError
from app.platform.logger import get_logger

logger = get_logger(__name__)

# GoTrue returns these alongside the user record; clients expect them grouped
LINK_PROPERTY_KEYS = ("action_link", "email_otp", "hashed_token", "redirect_to", "verification_type")


class IdentityProvider(Protocol):
    async def list_users(self) -> list[dict]: ...

    async def find_user_by_email(self, email: str) -> Optional[dict]: ...

    async def create_user(self, email: str, user_metadata: Optional[dict] = None) -> dict: ...

    async def generate_magic_link(self, email: str) -> dict: ...


class SupabaseIdentityProvider:
    """Client for the Supabase auth admin API, authenticated with the service-role key."""

    per_page = 1000

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._transport = transport

    @property
    def _base_url(self) -> str:
        return f"{self.settings.SUPABASE_URL.rstrip('/')}/auth/v1/admin"

    @property
    def _headers(self) -> dict:
        key = self.settings.SUPABASE_SERVICE_ROLE_KEY
        return {"apikey": key, "Authorization": f"Bearer {key}"}

    async def _request(self, method: str, path: str, failure: str, **kwargs) -> Any:
        if not self.settings.SUPABASE_URL or not self.settings.SUPABASE_SERVICE_ROLE_KEY:
            logger.error("Identity provider is not configured")
            raise IdentityProviderError(failure)

        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                headers=self._headers,
                timeout=self.settings.IDENTITY_TIMEOUT,
                transport=self._transport,
            ) as client:
                response = await client.request(method, path, **kwargs)
                response.raise_for_status()
                return response.json()

        except httpx.HTTPStatusError as e:
            logger.error(
                f"Identity provider {method} {path} failed: "
                f"{e.response.status_code} {e.response.text}"
            )
            raise IdentityProviderError(failure) from e

        except httpx.HTTPError as e:
            logger.error(f"Identity provider {method} {path} request failed: {str(e)}")
            raise IdentityProviderError(failure) from e

    async def list_users(self) -> list[dict]:
        users: list[dict] = []
        page = 1
        while True:
            data = await self._request(
                "GET",
                "/users",
                "Failed to check user",
                params={"page": page, "per_page": self.per_page},
            )
            batch = data.get("users", []) if isinstance(data, dict) else []
            users.extend(batch)
            if len(batch) < self.per_page:
                return users
            page += 1

    async def find_user_by_email(self, email: str) -> Optional[dict]:
        wanted = email.lower()
        for user in await self.list_users():
            if (user.get("email") or "").lower() == wanted:
                return user
        return None

    async def create_user(self, email: str, user_metadata: Optional[dict] = None) -> dict:
        return await self._request(
            "POST",
            "/users",
            "Failed to create user",
            json={"email": email, "email_confirm": True, "user_metadata": user_metadata or {}},
        )

    async def generate_magic_link(self, email: str) -> dict:
        data = await self._request(
            "POST",
            "/generate_link",
            "Failed to generate session",
            json={"type": "magiclink", "email": email},
        )
        if not data:
            raise IdentityProviderError("Failed to generate session")

        properties = {key: data.get(key) for key in LINK_PROPERTY_KEYS}
        user = {key: value for key, value in data.items() if key not in LINK_PROPERTY_KEYS}
        return {"properties": properties, "user": user}


def get_identity_provider(settings: Settings = Depends(get_settings)) -> IdentityProvider:
    return SupabaseIdentityProvider(settings)


async def user_ids_with_role(db: AsyncSession, role: str) -> list[str]:
    try:
        result = await db.execute(select(UserRole.user_id).where(UserRole.role == role))
    except SQLAlchemyError as e:
        logger.error(f"Error fetching {role} roles: {str(e)}")
        raise StoreReadError(f"Failed to fetch {role} roles") from e
    return list(result.scalars().all())
