from sqlalchemy import Column, DateTime, String

from app.platform.db.base import BaseModel


class AdminPin(BaseModel):
    """An outstanding admin login challenge.

    Issuance deletes earlier rows for the same email before inserting, so at
    most one row per email is live; nothing enforces that at the schema level.
    """

    __tablename__ = "admin_pins"

    email = Column(String(255), nullable=False, index=True)
    pin = Column(String(4), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)

    def __repr__(self):
        return f"<AdminPin(id={self.id}, email={self.email}, expires_at={self.expires_at})>"
