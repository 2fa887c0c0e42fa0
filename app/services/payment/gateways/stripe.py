"""
Stripe Payment Gateway Implementation
Implements BasePaymentGateway over the Stripe Checkout REST API
"""
import os
import logging
import httpx
from urllib.parse import quote
from typing import Dict, Any, Optional
from dotenv import load_dotenv

from app.services.payment.gateways.base import (
    BasePaymentGateway,
    CheckoutSessionResult,
    LineItem
)

load_dotenv()

logger = logging.getLogger(__name__)


class StripeGateway(BasePaymentGateway):
    """
    Stripe Checkout Implementation

    Features:
    - Hosted checkout session creation (mode=payment)
    - Session retrieval for settlement
    """

    gateway_id = "stripe"
    gateway_name = "Stripe"

    API_URL = "https://api.stripe.com/v1"
    TIMEOUT = 30.0

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """Initialize Stripe gateway"""
        env_config = self._load_config_from_env()

        # Credentials always come from env
        if config is not None:
            env_config.update({
                k: v for k, v in config.items()
                if k != "secret_key" and v is not None
            })

        super().__init__(env_config)

        self.secret_key = self.config.get("secret_key")

    def _load_config_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment variables"""
        secret_key = os.getenv("STRIPE_SECRET_KEY")
        if not secret_key:
            logger.warning("[WARN] STRIPE_SECRET_KEY not found in environment")

        return {
            "secret_key": secret_key,
            "api_url": os.getenv("STRIPE_API_URL", self.API_URL),
            "currency": os.getenv("PAYMENT_CURRENCY", "usd"),
        }

    def _validate_config(self):
        """Validate required Stripe configuration"""
        if not self.config.get("secret_key"):
            raise ValueError("STRIPE_SECRET_KEY is required")

    def _get_headers(self) -> Dict[str, str]:
        """Get headers for Stripe API requests"""
        return {
            "Authorization": f"Bearer {self.secret_key}",
            "Accept": "application/json"
        }

    def _build_session_form(
        self,
        line_item: LineItem,
        customer_email: str,
        success_url: str,
        cancel_url: str,
        metadata: Optional[Dict[str, str]]
    ) -> Dict[str, Any]:
        """Stripe takes form-encoded bodies with bracketed keys for nested objects"""
        prefix = "line_items[0]"
        form = {
            "mode": "payment",
            "customer_email": customer_email,
            "success_url": success_url,
            "cancel_url": cancel_url,
            f"{prefix}[quantity]": line_item.quantity,
            f"{prefix}[price_data][currency]": self.currency,
            f"{prefix}[price_data][unit_amount]": line_item.unit_amount,
            f"{prefix}[price_data][product_data][name]": line_item.name,
        }
        if line_item.description:
            form[f"{prefix}[price_data][product_data][description]"] = line_item.description
        if line_item.image:
            form[f"{prefix}[price_data][product_data][images][0]"] = line_item.image

        for key, value in (metadata or {}).items():
            form[f"metadata[{key}]"] = value

        return form

    def _parse_session(self, data: Dict[str, Any]) -> CheckoutSessionResult:
        payment_intent = data.get("payment_intent")
        # Expanded payment intents come back as objects
        if isinstance(payment_intent, dict):
            payment_intent = payment_intent.get("id")

        return CheckoutSessionResult(
            success=True,
            session_id=data.get("id"),
            url=data.get("url"),
            status=data.get("status"),
            payment_status=data.get("payment_status"),
            payment_intent=payment_intent,
            amount_total=data.get("amount_total"),
            customer_email=data.get("customer_email"),
            metadata=data.get("metadata") or {},
            raw_response=data
        )

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            return response.json().get("error", {}).get("message", "Unknown Stripe error")
        except ValueError:
            return f"Stripe returned HTTP {response.status_code}"

    async def create_checkout_session(
        self,
        line_item: LineItem,
        customer_email: str,
        success_url: str,
        cancel_url: str,
        metadata: Optional[Dict[str, str]] = None
    ) -> CheckoutSessionResult:
        """Create a Stripe Checkout session and return its hosted URL"""
        try:
            form = self._build_session_form(
                line_item, customer_email, success_url, cancel_url, metadata
            )

            async with httpx.AsyncClient(timeout=self.TIMEOUT) as client:
                response = await client.post(
                    self.get_api_url("/checkout/sessions"),
                    headers=self._get_headers(),
                    data=form
                )

            if response.status_code == 200:
                return self._parse_session(response.json())

            return CheckoutSessionResult(
                success=False,
                error_message=self._error_message(response)
            )

        except httpx.HTTPError as e:
            return CheckoutSessionResult(success=False, error_message=str(e))

    async def retrieve_checkout_session(self, session_id: str) -> CheckoutSessionResult:
        """Retrieve a Stripe Checkout session"""
        try:
            async with httpx.AsyncClient(timeout=self.TIMEOUT) as client:
                response = await client.get(
                    self.get_api_url(f"/checkout/sessions/{quote(session_id, safe='')}"),
                    headers=self._get_headers()
                )

            if response.status_code == 200:
                return self._parse_session(response.json())

            return CheckoutSessionResult(
                success=False,
                session_id=session_id,
                error_message=self._error_message(response)
            )

        except httpx.HTTPError as e:
            return CheckoutSessionResult(success=False, session_id=session_id, error_message=str(e))
