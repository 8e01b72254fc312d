from sqlalchemy import Column, String, UniqueConstraint

from app.platform.db.base import BaseModel


class UserRole(BaseModel):
    __tablename__ = "user_roles"
    __table_args__ = (UniqueConstraint("user_id", "role", name="uq_user_roles_user_id_role"),)

    user_id = Column(String(64), nullable=False, index=True)
    role = Column(String(32), nullable=False, index=True)

    def __repr__(self):
        return f"<UserRole(user_id={self.user_id}, role={self.role})>"
