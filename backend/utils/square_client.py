# backend/utils/square_client.py
import httpx
import logging
from typing import Optional
from urllib.parse import quote
from pydantic import BaseModel
from config import settings

logger = logging.getLogger(__name__)

SQUARE_HOSTS = {
    "production": "https://connect.squareup.com",
    "sandbox": "https://connect.squareupsandbox.com",
}

# The parts of a Square payment the verifier looks at
class GatewayPayment(BaseModel):
    id: str
    status: str
    amount_minor_units: Optional[int] = None
    currency: Optional[str] = None
    receipt_url: Optional[str] = None

class SquareClient:
    def __init__(self, access_token: str = None, environment: str = None,
                 api_version: str = None, timeout: float = None, transport: httpx.AsyncBaseTransport = None):
        self.access_token = access_token if access_token is not None else settings.SQUARE_ACCESS_TOKEN
        environment = environment or settings.SQUARE_ENVIRONMENT
        self.api_url = SQUARE_HOSTS["production" if environment == "production" else "sandbox"]
        self.api_version = api_version or settings.SQUARE_API_VERSION
        self.timeout = timeout if timeout is not None else settings.PAYMENT_GATEWAY_TIMEOUT
        # Injected in tests (httpx.MockTransport)
        self.transport = transport

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Square-Version": self.api_version,
            "Accept": "application/json",
        }

    async def get_payment(self, payment_id: str) -> Optional[GatewayPayment]:
        # Retrieve a payment by id; None when Square doesn't know it
        url = f"{self.api_url}/v2/payments/{quote(payment_id, safe='')}"
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(url, headers=self._headers())
                if response.status_code == 404:
                    return None
                response.raise_for_status()
            except (httpx.RequestError, httpx.HTTPStatusError) as e:
                logger.error(f"Square get payment error: {e}")
                raise

        payment = response.json().get("payment")
        if not payment:
            return None

        amount_money = payment.get("amount_money") or {}
        return GatewayPayment(
            id=payment.get("id", payment_id),
            status=payment.get("status", ""),
            amount_minor_units=amount_money.get("amount"),
            currency=amount_money.get("currency"),
            receipt_url=payment.get("receipt_url"),
        )

square_client = SquareClient()

def get_payment_gateway() -> SquareClient:
    return square_client
