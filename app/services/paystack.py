"""Paystack REST API client"""

import hashlib
import hmac
import time
from typing import Optional
from uuid import UUID

import httpx
import structlog

from app.config import settings

logger = structlog.get_logger()


class PaystackError(Exception):
    """Gateway call failed; the message is the gateway's own"""


class PaystackNotConfiguredError(PaystackError):
    pass


class PaystackRateLimitError(PaystackError):
    pass


def build_reference(order_id: UUID) -> str:
    """Transaction reference embedding the order id and a timestamp"""
    return f"{settings.paystack_reference_prefix}-{order_id}-{int(time.time() * 1000)}"


def compute_signature(secret_key: str, raw_body: bytes) -> str:
    return hmac.new(secret_key.encode("utf-8"), raw_body, hashlib.sha512).hexdigest()


def verify_signature(secret_key: str, raw_body: bytes, signature: Optional[str]) -> bool:
    """Check the x-paystack-signature header against the raw request body"""
    if not secret_key or not signature:
        return False
    expected = compute_signature(secret_key, raw_body)
    return hmac.compare_digest(expected, signature)


def _is_rate_limited(status_code: int, message: str) -> bool:
    return status_code == 429 or "rate limit" in message.lower()


class PaystackClient:
    """Thin async wrapper over the Paystack endpoints the store uses"""

    def __init__(
        self,
        secret_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.secret_key = secret_key if secret_key is not None else settings.paystack_secret_key
        self.base_url = (base_url or settings.paystack_base_url).rstrip("/")
        self.timeout = timeout or settings.paystack_timeout_seconds

    @property
    def is_configured(self) -> bool:
        return bool(self.secret_key)

    async def _request(self, method: str, path: str, json: Optional[dict] = None) -> dict:
        if not self.is_configured:
            raise PaystackNotConfiguredError("Paystack not configured")

        headers = {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/json",
        }

        logger.debug("Paystack request", method=method, path=path)

        try:
            async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout) as client:
                response = await client.request(method, path, json=json, headers=headers)
        except httpx.HTTPError as e:
            raise PaystackError(f"Payment gateway unreachable: {e}") from e

        try:
            result = response.json()
        except ValueError:
            result = {"status": False, "message": response.text or "Invalid gateway response"}

        if response.is_error or not result.get("status"):
            message = result.get("message") or f"Paystack request failed ({response.status_code})"
            logger.error(
                "Paystack error",
                path=path,
                status_code=response.status_code,
                message=message,
            )
            if _is_rate_limited(response.status_code, message):
                raise PaystackRateLimitError(message)
            raise PaystackError(message)

        return result["data"]

    async def initialize_transaction(
        self,
        email: str,
        amount_kobo: int,
        reference: str,
        callback_url: Optional[str] = None,
        metadata: Optional[dict] = None,
    ) -> dict:
        """Start a hosted-checkout transaction"""
        payload = {
            "email": email,
            "amount": amount_kobo,
            "reference": reference,
            "callback_url": callback_url or settings.paystack_callback_url,
            "metadata": metadata or {},
        }
        return await self._request("POST", "/transaction/initialize", json=payload)

    async def verify_transaction(self, reference: str) -> dict:
        return await self._request("GET", f"/transaction/verify/{reference}")

    async def create_customer(
        self,
        email: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> dict:
        payload = {
            "email": email,
            "first_name": first_name,
            "last_name": last_name,
            "phone": phone,
        }
        return await self._request("POST", "/customer", json=payload)

    async def create_dedicated_account(self, customer_code: str) -> dict:
        payload = {
            "customer": customer_code,
            "preferred_bank": settings.paystack_preferred_bank,
        }
        return await self._request("POST", "/dedicated_account", json=payload)


def get_paystack_client() -> PaystackClient:
    """Dependency returning a client bound to the current settings"""
    return PaystackClient()
