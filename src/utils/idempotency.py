import time
from typing import Any, Optional

import boto3
from botocore.exceptions import ClientError

from src.errors import UpstreamError
from src.utils.logger import get_logger

logger = get_logger("idempotency")

DEFAULT_TTL_SECS = 86400


class IdempotencyGuard:
    """
    DynamoDB claim table for Shopify webhook ids (X-Shopify-Webhook-Id).

    Shopify redelivers a webhook until it gets a 2xx, so the same order
    event can arrive more than once. claim() is a conditional put: only the
    first caller for an id wins. The table should have TTL enabled on "exp".
    """

    def __init__(self, table: str, ttl_secs: int = DEFAULT_TTL_SECS, client: Any = None) -> None:
        self._table = table
        self._ttl_secs = ttl_secs
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = boto3.client("dynamodb")
        return self._client

    def claim(self, event_id: Optional[str]) -> bool:
        """Return True if this id is new; False if it was already claimed."""
        if not event_id:
            return True
        try:
            self.client.put_item(
                TableName=self._table,
                Item={
                    "pk": {"S": event_id},
                    "exp": {"N": str(int(time.time()) + self._ttl_secs)},
                },
                ConditionExpression="attribute_not_exists(pk)",
            )
            return True
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                logger.info("idempotency.duplicate", extra={"event_id": event_id})
                return False
            logger.error(
                "idempotency.claim_failed",
                extra={"event_id": event_id, "error": str(e)},
            )
            raise UpstreamError("Idempotency table unavailable") from e

    def release(self, event_id: Optional[str]) -> None:
        """Drop a claim so a redelivery can be processed again."""
        if not event_id:
            return
        try:
            self.client.delete_item(TableName=self._table, Key={"pk": {"S": event_id}})
        except ClientError as e:
            # The claim expires via TTL anyway; the original failure matters more.
            logger.warning(
                "idempotency.release_failed",
                extra={"event_id": event_id, "error": str(e)},
            )
