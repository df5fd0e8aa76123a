"""
Shopify SMS Notifier Utilities
==============================

Shared helper modules for the order-notification Lambda:

- logger.py          → structured JSON logging
- config.py          → environment-driven settings
- secrets.py         → AWS Secrets Manager integration
- sms_gateway.py     → credit-service and SMS gateway HTTP clients
- idempotency.py     → DynamoDB-based duplicate-delivery guard

Everything here is safe to build once per Lambda container and reuse
across invocations.
"""

from .logger import get_logger, log

__all__ = [
    "get_logger",
    "log",
]
