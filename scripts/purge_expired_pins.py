import asyncio

from app.features.admin_pin.services.pin_store import PinStore
from app.platform.db.base import utc_now
from app.platform.db.session import SessionLocal


async def purge_expired_pins():
    async with SessionLocal() as db:
        removed = await PinStore(db).purge_expired(utc_now())
        print(f"Removed {removed} expired admin PINs")


if __name__ == "__main__":
    asyncio.run(purge_expired_pins())
