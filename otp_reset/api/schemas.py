from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# Clients send phone numbers and codes both as JSON strings and numbers
TextOrNumber = Optional[Union[str, int]]


class SendOtpRequest(BaseModel):
    phone: TextOrNumber = None


class VerifyOtpRequest(BaseModel):
    phone: TextOrNumber = None
    otp: TextOrNumber = None


class ResetPasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    phone: TextOrNumber = None
    otp: TextOrNumber = None
    new_password: TextOrNumber = Field(default=None, alias="newPassword")


class MessageResponse(BaseModel):
    success: bool
    message: str


class VerifyResponse(BaseModel):
    success: bool
    verified: bool


def as_text(value: TextOrNumber) -> Optional[str]:
    if value is None:
        return None
    return str(value)
