"""
Base Payment Gateway
Abstract class defining the interface for hosted-checkout payment gateways
"""
from abc import ABC, abstractmethod
from typing import Dict, Any, Optional
from dataclasses import dataclass, field
from enum import Enum


class CheckoutSessionStatus(str, Enum):
    """Standard checkout session status across all gateways"""
    OPEN = "open"
    COMPLETE = "complete"
    EXPIRED = "expired"


@dataclass
class LineItem:
    """One product line on a hosted checkout page"""
    name: str
    unit_amount: int  # Minor currency units (cents)
    quantity: int = 1
    description: Optional[str] = None
    image: Optional[str] = None


@dataclass
class CheckoutSessionResult:
    """Result of creating or retrieving a checkout session"""
    success: bool
    session_id: Optional[str] = None
    url: Optional[str] = None
    status: Optional[str] = None
    payment_status: Optional[str] = None
    payment_intent: Optional[str] = None
    amount_total: Optional[int] = None  # Minor currency units
    customer_email: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)
    error_message: Optional[str] = None
    raw_response: Optional[Dict[str, Any]] = None

    @property
    def is_complete(self) -> bool:
        return self.status == CheckoutSessionStatus.COMPLETE.value


class BasePaymentGateway(ABC):
    """
    Abstract base class for payment gateways.
    All payment gateways must implement these methods.
    """

    gateway_id: str = "base"
    gateway_name: str = "Base Gateway"

    def __init__(self, config: Dict[str, Any]):
        """
        Initialize gateway with configuration.

        Args:
            config: Gateway configuration including API keys, endpoints, etc.
        """
        self.config = config
        self.currency = config.get("currency", "usd")
        self._validate_config()

    @abstractmethod
    def _validate_config(self):
        """Validate required configuration parameters"""
        pass

    @abstractmethod
    async def create_checkout_session(
        self,
        line_item: LineItem,
        customer_email: str,
        success_url: str,
        cancel_url: str,
        metadata: Optional[Dict[str, str]] = None
    ) -> CheckoutSessionResult:
        """
        Create a hosted checkout session.

        Args:
            line_item: The single product being paid for
            customer_email: Payer's email, prefilled on the checkout page
            success_url: Redirect after payment
            cancel_url: Redirect when the payer backs out
            metadata: Opaque key/values returned on retrieval

        Returns:
            CheckoutSessionResult with the hosted page URL
        """
        pass

    @abstractmethod
    async def retrieve_checkout_session(self, session_id: str) -> CheckoutSessionResult:
        """
        Retrieve a checkout session's current state.

        Args:
            session_id: Gateway's session ID

        Returns:
            CheckoutSessionResult with status, payment intent and metadata
        """
        pass

    def get_api_url(self, endpoint: str) -> str:
        """Get full API URL for endpoint"""
        base_url = self.config.get("api_url", "")
        return f"{base_url.rstrip('/')}/{endpoint.lstrip('/')}"

    @staticmethod
    def to_minor_units(amount: float) -> int:
        """Convert a currency amount to integer minor units"""
        return int(round(float(amount) * 100))
