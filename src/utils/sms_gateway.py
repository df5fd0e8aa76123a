# utils/sms_gateway.py

import uuid
from typing import Any, Dict, Optional, Tuple

import httpx

from src.errors import DispatchError, QuotaExhaustedError, UpstreamError, UpstreamTimeoutError
from src.models import FAILURE, SUCCESS, DispatchResult
from src.utils.config import Settings
from src.utils.logger import get_logger

logger = get_logger("sms_gateway")

# Credit endpoint code meaning the account has no sends left
CREDIT_EXHAUSTED = -5
SUCCESS_STATUS = "Success"


class _GatewayClient:
    """Shared POST-and-decode plumbing for both upstream services."""

    service = "upstream"

    def __init__(
        self,
        url: str,
        username: str,
        password: str,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._url = url
        self._username = username
        self._password = password
        self._client = client or httpx.Client(timeout=timeout)

    def _credentials(self) -> Dict[str, str]:
        return {"UserName": self._username, "Password": self._password}

    def _post(self, payload: Dict[str, Any]) -> Any:
        try:
            resp = self._client.post(self._url, json=payload)
            resp.raise_for_status()
        except httpx.TimeoutException as e:
            logger.error(f"{self.service}.timeout", extra={"url": self._url, "error": str(e)})
            raise UpstreamTimeoutError(f"{self.service} timed out") from e
        except httpx.HTTPStatusError as e:
            logger.error(
                f"{self.service}.http_error",
                extra={"url": self._url, "status_code": e.response.status_code},
            )
            raise UpstreamError(
                f"{self.service} returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"{self.service}.transport_error", extra={"url": self._url, "error": str(e)})
            raise UpstreamError(f"{self.service} unreachable") from e

        try:
            return resp.json()
        except ValueError as e:
            logger.error(
                f"{self.service}.invalid_json",
                extra={"url": self._url, "body_preview": resp.text[:200]},
            )
            raise UpstreamError(f"{self.service} returned a non-JSON response") from e

    def close(self) -> None:
        self._client.close()


class CreditClient(_GatewayClient):
    """Asks the credit service how many sends the account has left."""

    service = "credit"

    def check_remaining(self) -> int:
        data = self._post(self._credentials())

        remaining = _as_int(data)
        if remaining is None:
            logger.error("credit.invalid_response", extra={"response": repr(data)[:200]})
            raise UpstreamError("Invalid credit response")

        if remaining == CREDIT_EXHAUSTED:
            logger.warning("credit.exhausted", extra={"code": remaining})
            raise QuotaExhaustedError("SMS quota exceeded")

        if remaining < 0:
            logger.error("credit.error_code", extra={"code": remaining})
            raise UpstreamError(f"Credit service error code {remaining}")

        logger.info("credit.checked", extra={"remaining": remaining})
        return remaining


class SmsClient(_GatewayClient):
    """Submits a single SMS. Never retries: the gateway's behaviour on a
    repeated SMSID is undocumented."""

    service = "sms"

    def __init__(self, url: str, username: str, password: str, sender: str,
                 language: str = "ar", timeout: float = 10.0,
                 client: Optional[httpx.Client] = None) -> None:
        super().__init__(url, username, password, timeout=timeout, client=client)
        self._sender = sender
        self._language = language

    def send(self, phone: str, message: str) -> DispatchResult:
        sms_id = str(uuid.uuid4())
        payload = {
            **self._credentials(),
            "SMSText": message,
            "SMSLang": self._language,
            "SMSSender": self._sender,
            "SMSReceiver": phone,
            "SMSID": sms_id,
        }

        data = self._post(payload)

        status = data.get("Status") if isinstance(data, dict) else None
        if status != SUCCESS_STATUS:
            logger.error(
                "sms.rejected",
                extra={"sms_id": sms_id, "to": phone, "response": repr(data)[:500]},
            )
            raw = data if isinstance(data, dict) else {"response": data}
            raise DispatchError(
                f"SMS sending failed: status={status!r}",
                result=DispatchResult(provider_message_id=sms_id, status=FAILURE, raw=raw),
            )

        provider_id = str(data.get("SMSID") or sms_id)
        logger.info("sms.sent", extra={"sms_id": provider_id, "to": phone})
        return DispatchResult(provider_message_id=provider_id, status=SUCCESS, raw=data)


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def build_clients(settings: Settings) -> Tuple[CreditClient, SmsClient]:
    """
    Build the credit and SMS clients from settings.

    Returns:
        (credit_client, sms_client), each with its own bounded-timeout
        httpx.Client.
    """
    credit = CreditClient(
        settings.check_credit_url,
        settings.sms_username,
        settings.sms_password,
        timeout=settings.http_timeout_seconds,
    )
    sms = SmsClient(
        settings.sms_api_url,
        settings.sms_username,
        settings.sms_password,
        sender=settings.sms_sender,
        language=settings.sms_language,
        timeout=settings.http_timeout_seconds,
    )
    logger.info(
        "sms_gateway.clients_initialized",
        extra={"timeout_seconds": settings.http_timeout_seconds},
    )
    return credit, sms
