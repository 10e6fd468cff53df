"""Payment proxy schemas"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel, EmailStr, Field


class PaymentAction(BaseModel):
    """Proxy request envelope; the remaining fields depend on ``action``"""
    action: str

    # initialize
    email: Optional[EmailStr] = None
    amount: Optional[float] = Field(default=None, gt=0)
    order_id: Optional[UUID] = None
    order_ids: List[UUID] = []
    metadata: dict = {}
    callback_url: Optional[str] = None

    # verify
    reference: Optional[str] = None

    # create_virtual_account
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None


class InitializeResponse(BaseModel):
    authorization_url: str
    access_code: str
    reference: str


class VerifyResponse(BaseModel):
    status: str
    amount: float
    reference: str


class VirtualAccountResponse(BaseModel):
    account_number: Optional[str] = None
    account_name: Optional[str] = None
    bank_name: Optional[str] = None
    use_fallback: bool = False
    message: Optional[str] = None


class PaymentSettingsUpdate(BaseModel):
    bank_name: Optional[str] = Field(default=None, max_length=255)
    account_name: Optional[str] = Field(default=None, max_length=255)
    account_number: Optional[str] = Field(default=None, max_length=50)
    additional_note: Optional[str] = None


class PaymentSettingsResponse(BaseModel):
    bank_name: str
    account_name: str
    account_number: str
    additional_note: Optional[str]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True
