import base64
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

SUCCESS = "success"
FAILURE = "failure"


@dataclass(frozen=True)
class InboundRequest:
    """A webhook delivery with its body captured byte-for-byte."""

    method: str
    headers: Mapping[str, str]
    raw_body: bytes = b""
    # Still-encoded body when API Gateway set isBase64Encoded
    encoded_body: Optional[str] = None

    @classmethod
    def from_lambda_event(cls, event: Dict[str, Any]) -> "InboundRequest":
        """
        Build a request from an API Gateway HTTP API (v2) event.

        API Gateway hands the body over as text, or as base64 when
        isBase64Encoded is set. Base64 bodies are kept encoded here and only
        decoded by read_body(), so method and header checks never depend on
        the body.
        """
        http = (event.get("requestContext") or {}).get("http") or {}
        method = http.get("method") or event.get("httpMethod") or ""

        headers = {
            str(k).lower(): str(v)
            for k, v in (event.get("headers") or {}).items()
            if v is not None
        }

        body = event.get("body")
        encoded_body = None
        if body is None:
            raw_body = b""
        elif event.get("isBase64Encoded"):
            raw_body = b""
            encoded_body = body.decode("ascii", "replace") if isinstance(body, bytes) else str(body)
        elif isinstance(body, bytes):
            raw_body = body
        else:
            raw_body = str(body).encode("utf-8")

        return cls(
            method=method.upper(),
            headers=MappingProxyType(headers),
            raw_body=raw_body,
            encoded_body=encoded_body,
        )

    def header(self, name: str) -> str:
        return self.headers.get(name.lower(), "")

    def read_body(self) -> bytes:
        """The exact body bytes; raises ValueError for undecodable base64."""
        if self.encoded_body is None:
            return self.raw_body
        return base64.b64decode(self.encoded_body)


@dataclass(frozen=True)
class DispatchResult:
    provider_message_id: str
    status: str = SUCCESS
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == SUCCESS
