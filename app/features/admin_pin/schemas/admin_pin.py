from typing import Any

from pydantic import BaseModel, EmailStr, field_validator

from app.features.admin_pin.utils.pin import is_valid_pin


class SendAdminPinRequest(BaseModel):
    email: EmailStr


class VerifyAdminPinRequest(BaseModel):
    email: EmailStr
    pin: str

    @field_validator("pin")
    @classmethod
    def validate_pin(cls, v: str) -> str:
        if not is_valid_pin(v):
            raise ValueError("PIN must be exactly 4 digits")
        return v


class SendAdminPinResponse(BaseModel):
    success: bool = True
    message: str


class VerifyAdminPinResponse(BaseModel):
    success: bool = True
    session: dict[str, Any]
    message: str
