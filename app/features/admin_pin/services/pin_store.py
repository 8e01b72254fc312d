from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.admin_pin.models.admin_pin import AdminPin


class PinStore:
    """Access to the ``admin_pins`` table. Every write commits immediately."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def delete_for_email(self, email: str) -> int:
        result = await self.db.execute(
            delete(AdminPin)
            .where(AdminPin.email == email)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        return result.rowcount or 0

    async def create(self, email: str, pin: str, expires_at: datetime) -> AdminPin:
        record = AdminPin(email=email, pin=pin, expires_at=expires_at)
        self.db.add(record)
        await self.db.commit()
        await self.db.refresh(record)
        return record

    async def consume(self, email: str, pin: str, now: datetime) -> Optional[str]:
        """
        Delete the live row matching (email, pin) and return its id.

        Lookup and delete are one conditional DELETE ... RETURNING statement,
        so two concurrent verifications of the same code cannot both succeed.
        """
        result = await self.db.execute(
            delete(AdminPin)
            .where(
                AdminPin.email == email,
                AdminPin.pin == pin,
                AdminPin.expires_at > now,
            )
            .returning(AdminPin.id)
            .execution_options(synchronize_session=False)
        )
        consumed = list(result.scalars().all())
        await self.db.commit()
        return consumed[0] if consumed else None

    async def live_for_email(self, email: str, now: datetime) -> list[AdminPin]:
        result = await self.db.execute(
            select(AdminPin)
            .where(AdminPin.email == email, AdminPin.expires_at > now)
            .order_by(AdminPin.created_at.desc())
        )
        return list(result.scalars().all())

    async def purge_expired(self, now: datetime) -> int:
        result = await self.db.execute(
            delete(AdminPin)
            .where(AdminPin.expires_at <= now)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        return result.rowcount or 0
