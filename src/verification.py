import base64
import binascii
import hashlib
import hmac

from src.utils.logger import get_logger

logger = get_logger("verification")


def verify_signature(signature_header: str, raw_body: bytes, secret: str) -> bool:
    """
    Verify Shopify's X-Shopify-Hmac-SHA256 header against the raw body.

    The digest is computed over the bytes exactly as received; a body that
    was parsed and re-serialized will not verify. Returns False instead of
    raising on any problem.
    """
    if not secret:
        logger.warning("verification.secret_missing")
        return False
    if not signature_header:
        logger.warning("verification.header_missing")
        return False

    try:
        provided = base64.b64decode(signature_header, validate=True)
    except (binascii.Error, ValueError) as e:
        logger.warning(
            "verification.malformed_signature",
            extra={"error": str(e), "header_length": len(signature_header)},
        )
        return False

    try:
        expected = hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).digest()
    except TypeError as e:
        logger.error("verification.digest_error", extra={"error": str(e)})
        return False

    return hmac.compare_digest(expected, provided)
