"""
Payment Gateway Factory
Resolves the hosted-checkout gateway used for contest entries
"""
import os
from typing import Dict, Any, List, Optional, Type
from dotenv import load_dotenv

from app.services.payment.gateways.base import BasePaymentGateway
from app.services.payment.gateways.stripe import StripeGateway

load_dotenv()

DEFAULT_GATEWAY = os.getenv("PAYMENT_GATEWAY", "stripe")


class PaymentGatewayFactory:
    """
    Registry of checkout gateways.

    Instances are cached per (gateway, config) so the API process reuses one
    configured gateway; `clear_cache` forces env to be re-read.
    """

    _gateways: Dict[str, Type[BasePaymentGateway]] = {
        "stripe": StripeGateway,
    }

    _instances: Dict[str, BasePaymentGateway] = {}

    @classmethod
    def register_gateway(cls, gateway_id: str, gateway_class: Type[BasePaymentGateway]):
        cls._gateways[gateway_id] = gateway_class

    @classmethod
    def get_available_gateways(cls) -> List[str]:
        return list(cls._gateways.keys())

    @classmethod
    def get_gateway(
        cls,
        gateway_id: str,
        config: Optional[Dict[str, Any]] = None,
        use_cache: bool = True
    ) -> BasePaymentGateway:
        """
        Get a configured gateway instance.

        Raises:
            ValueError: unknown gateway id, or the gateway's own config check failed
        """
        gateway_class = cls._gateways.get(gateway_id)
        if gateway_class is None:
            raise ValueError(f"Unknown payment gateway: {gateway_id}. Available: {cls.get_available_gateways()}")

        cache_key = gateway_id
        if config:
            cache_key = f"{gateway_id}:{sorted(config.items())}"

        if use_cache and cache_key in cls._instances:
            return cls._instances[cache_key]

        instance = gateway_class(config)
        if use_cache:
            cls._instances[cache_key] = instance
        return instance

    @classmethod
    def get_default_gateway(cls) -> BasePaymentGateway:
        """Gateway named by PAYMENT_GATEWAY (Stripe unless overridden)"""
        return cls.get_gateway(DEFAULT_GATEWAY)

    @classmethod
    def clear_cache(cls):
        cls._instances.clear()
