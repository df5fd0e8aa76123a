"""
Shopify Order SMS Notifier
==========================

Root package for the Lambda that turns Shopify order webhooks into customer
text messages. Every delivery is HMAC-verified, mapped to an Arabic SMS,
checked against the SMS account's quota, and sent through the SMS gateway.

Modules under this package:
- webhook.py       → HTTP endpoint for Shopify order webhooks (POST /webhooks/shopify)
- health.py        → Health and version check (/healthz)
- verification.py  → Shopify HMAC-SHA256 signature check
- payload.py       → JSON decoding and phone/order field lookup
- messages.py      → topic → SMS text templates
- quota.py         → credit-service and per-process quota policies
- errors.py        → typed pipeline failures and their HTTP statuses
- utils/           → logging, settings, secrets, gateway clients, idempotency

Environment variables expected:
  • SHOPIFY_WEBHOOK_SECRET     - Shopify webhook signing secret
  • SMS_USERNAME / SMS_PASSWORD - SMS account credentials
  • CHECK_CREDIT_URL           - Credit (remaining balance) endpoint
  • SMS_API_URL                - SMS send endpoint
  • SMS_SENDER                 - Registered sender name
  • STORE_PHONE                - Store contact shown in cancellation texts
  • SMS_SECRET_NAME            - Secrets Manager secret overriding the credentials (optional)
  • QUOTA_MODE / MAX_QUOTA     - "credit" (default) or "session" with a fixed ceiling
  • HTTP_TIMEOUT_SECONDS       - Timeout for every upstream call (default: 10)
  • IDEMPOTENCY_TABLE          - DynamoDB table for duplicate-delivery prevention (optional)
  • APP_ENV                    - "development" adds error details to 500 responses
  • LOG_LEVEL                  - Log verbosity (default: INFO)
"""

__version__ = "1.0.0"
__license__ = "MIT"

__all__ = ["__version__"]
