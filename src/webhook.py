import json
import traceback
from typing import Any, Dict, Optional, Tuple

from src.errors import (
    AuthenticationError,
    MethodNotAllowedError,
    MissingHeadersError,
    PhoneNotFoundError,
    QuotaExhaustedError,
    UnreadableBodyError,
    UnsupportedEventError,
    UpstreamError,
    WebhookError,
)
from src.messages import compose
from src.models import InboundRequest
from src.payload import decode_payload, extract_phone
from src.quota import CreditServiceQuota, SessionQuota
from src.utils.config import Settings, load_settings
from src.utils.idempotency import IdempotencyGuard
from src.utils.logger import get_logger
from src.utils.sms_gateway import SmsClient, build_clients
from src.verification import verify_signature

logger = get_logger("webhook")

TOPIC_HEADER = "x-shopify-topic"
SHOP_HEADER = "x-shopify-shop-domain"
SIGNATURE_HEADER = "x-shopify-hmac-sha256"
WEBHOOK_ID_HEADER = "x-shopify-webhook-id"

REQUIRED_HEADERS = (TOPIC_HEADER, SHOP_HEADER, SIGNATURE_HEADER)


class WebhookPipeline:
    """
    Verify → decode → extract → compose → quota → dispatch.

    handle() returns (status_code, body) for predictable outcomes and raises
    only for failures it has no name for.
    """

    def __init__(
        self,
        webhook_secret: str,
        quota: Any,
        sms_client: SmsClient,
        store_contact: str = "",
        idempotency: Optional[IdempotencyGuard] = None,
        debug: bool = False,
    ) -> None:
        self._webhook_secret = webhook_secret
        self._quota = quota
        self._sms_client = sms_client
        self._store_contact = store_contact
        self._idempotency = idempotency
        self.debug = debug

    def handle(self, request: InboundRequest) -> Tuple[int, Dict[str, Any]]:
        try:
            return 200, self._process(request)
        except WebhookError as e:
            return e.status_code, self._error_body(e, request)

    def _error_body(self, e: WebhookError, request: InboundRequest) -> Dict[str, Any]:
        context = {
            "error_code": e.error_code,
            "status_code": e.status_code,
            "topic": request.header(TOPIC_HEADER),
            "shop_domain": request.header(SHOP_HEADER),
            "webhook_id": request.header(WEBHOOK_ID_HEADER),
        }
        if isinstance(e, UpstreamError):
            logger.error(
                "webhook.upstream_failure",
                extra={**context, "error": e.message, "retryable": e.retryable},
            )
            body = {"error": "Internal Server Error", "details": e.message}
            if self.debug:
                body["stack"] = "".join(traceback.format_exception(type(e), e, e.__traceback__))
            return body

        logger.warning("webhook.rejected", extra={**context, "error": e.message})
        return {"error": e.message}

    def _process(self, request: InboundRequest) -> Dict[str, Any]:
        # 1) Method
        if request.method != "POST":
            raise MethodNotAllowedError("Method Not Allowed")

        # 2) Required headers, before the body is touched
        missing = [name for name in REQUIRED_HEADERS if not request.header(name)]
        if missing:
            logger.warning("webhook.missing_headers", extra={"missing": missing})
            raise MissingHeadersError("Missing required headers")

        topic = request.header(TOPIC_HEADER)
        webhook_id = request.header(WEBHOOK_ID_HEADER) or None

        # 3) Raw body, only now that method and headers are known good
        try:
            raw_body = request.read_body()
        except ValueError as e:
            logger.warning("webhook.unreadable_body", extra={"error": str(e)})
            raise UnreadableBodyError("Unreadable request body") from e

        # 4) Signature over the exact raw bytes
        if not verify_signature(request.header(SIGNATURE_HEADER), raw_body, self._webhook_secret):
            raise AuthenticationError("Invalid HMAC signature")

        # 5) Decode
        payload = decode_payload(raw_body)

        # 6) Recipient
        phone = extract_phone(payload)
        if not phone:
            raise PhoneNotFoundError("Phone number not found")

        # 7) Message; unsupported topics stop here, before any upstream call
        message = compose(topic, payload, self._store_contact)
        if message is None:
            raise UnsupportedEventError("Unsupported event type")

        # 8) Duplicate delivery
        if self._idempotency and not self._idempotency.claim(webhook_id):
            return {"success": True, "duplicate": True, "message": "Duplicate webhook ignored"}

        # 9) Quota, then 10) dispatch. Anything that stops the send hands back
        # the quota slot and the delivery claim so a redelivery can still send.
        reserved = False
        try:
            remaining = self._quota.reserve()
            if remaining <= 0:
                raise QuotaExhaustedError("SMS quota exceeded")
            reserved = True
            result = self._sms_client.send(phone, message)
        except Exception:
            if reserved:
                self._quota.release()
            self._release_claim(webhook_id)
            raise

        logger.info(
            "webhook.sms_dispatched",
            extra={
                "topic": topic,
                "shop_domain": request.header(SHOP_HEADER),
                "webhook_id": webhook_id,
                "sms_id": result.provider_message_id,
                "remaining_quota": remaining - 1,
            },
        )

        body = {
            "success": True,
            "message": "SMS sent successfully",
            "remaining_quota": remaining - 1,
            "sms_id": result.provider_message_id,
        }
        snapshot = self._quota.snapshot()
        if snapshot is not None:
            body["quota"] = snapshot
        return body

    def _release_claim(self, webhook_id: Optional[str]) -> None:
        if self._idempotency:
            self._idempotency.release(webhook_id)


def build_pipeline(settings: Settings) -> WebhookPipeline:
    credit_client, sms_client = build_clients(settings)

    if settings.quota_mode == "session":
        quota = SessionQuota(settings.max_quota)
    else:
        quota = CreditServiceQuota(credit_client)

    idempotency = IdempotencyGuard(settings.idempotency_table) if settings.idempotency_table else None

    logger.info(
        "webhook.pipeline_built",
        extra={
            "quota_mode": settings.quota_mode,
            "idempotency_enabled": idempotency is not None,
            "app_env": settings.app_env,
        },
    )
    return WebhookPipeline(
        webhook_secret=settings.shopify_webhook_secret,
        quota=quota,
        sms_client=sms_client,
        store_contact=settings.store_phone,
        idempotency=idempotency,
        debug=settings.debug,
    )


# Built on first invocation, then reused for the life of the container
_pipeline: Optional[WebhookPipeline] = None


def get_pipeline() -> WebhookPipeline:
    global _pipeline
    if _pipeline is None:
        _pipeline = build_pipeline(load_settings())
    return _pipeline


def _response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body, ensure_ascii=False),
    }


def lambda_handler(event, context):
    request = InboundRequest.from_lambda_event(event or {})

    logger.info(
        "webhook.lambda_start",
        extra={
            "request_id": getattr(context, "aws_request_id", None),
            "method": request.method,
            "topic": request.header(TOPIC_HEADER),
            "shop_domain": request.header(SHOP_HEADER),
            "webhook_id": request.header(WEBHOOK_ID_HEADER),
            "base64_body": request.encoded_body is not None,
        },
    )

    # Misconfiguration is a 500, not a 4xx
    try:
        pipeline = get_pipeline()
    except RuntimeError as e:
        logger.error("webhook.config_error", extra={"error": str(e)})
        return _response(500, {"error": "server_misconfigured"})

    try:
        status_code, body = pipeline.handle(request)
    except Exception as e:
        logger.exception(
            "webhook.unhandled_error",
            extra={"topic": request.header(TOPIC_HEADER), "error_type": type(e).__name__},
        )
        body = {"error": "Internal Server Error", "details": type(e).__name__}
        if pipeline.debug:
            body["details"] = str(e)
            body["stack"] = traceback.format_exc()
        return _response(500, body)

    return _response(status_code, body)
