# app/lambdas/notes_api/store.py
import logging
from dataclasses import dataclass, field
from decimal import DecimalException
from typing import Any, Dict, List, Optional

import boto3
from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import BotoCoreError, ClientError

from .errors import StoreError

logger = logging.getLogger(__name__)

PARTITION_KEY = "user_id"
SORT_KEY = "timestamp"


@dataclass
class StoreResult:
    items: List[Dict[str, Any]] = field(default_factory=list)
    count: int = 0
    metadata: Dict[str, Any] = field(default_factory=dict)
    item: Optional[Dict[str, Any]] = None


def _metadata(response) -> Dict[str, Any]:
    meta = response.get("ResponseMetadata", {})
    return {
        "httpStatusCode": meta.get("HTTPStatusCode"),
        "requestId": meta.get("RequestId"),
        "attempts": meta.get("RetryAttempts", 0) + 1,
    }


def key_of(item: Dict[str, Any]) -> Dict[str, Any]:
    return {PARTITION_KEY: item[PARTITION_KEY], SORT_KEY: item[SORT_KEY]}


def _guard(note_id=None):
    # the record must still exist, and still be the one the lookup found
    condition = Attr(PARTITION_KEY).exists()
    if note_id is not None:
        condition = condition & Attr("note_id").eq(note_id)
    return condition


class NotesStore:
    """
    Thin gateway over the notes table and its note_id global index.
    Every call is a single DynamoDB request; botocore errors come out
    as StoreError / ConditionalCheckFailed.
    """

    def __init__(self, table, index_name):
        self.table = table
        self.index_name = index_name

    @classmethod
    def from_settings(cls, settings):
        resource = boto3.resource(
            "dynamodb",
            region_name=settings.region,
            endpoint_url=settings.endpoint_url,
        )
        return cls(resource.Table(settings.table_name), settings.index_name)

    def _call(self, op, **kwargs):
        logger.debug("DynamoDB %s: %s", op, kwargs)
        try:
            return getattr(self.table, op)(**kwargs)
        except ClientError as e:
            err = StoreError.from_client_error(e)
            logger.warning("DynamoDB %s failed: %s (%s)", op, err.code, err.message)
            raise err from e
        except BotoCoreError as e:
            err = StoreError.from_botocore_error(e)
            logger.warning("DynamoDB %s failed: %s", op, err.message)
            raise err from e
        except (TypeError, DecimalException) as e:
            # boto3 refused to serialize a value, e.g. a float or a 39-digit number
            err = StoreError(str(e), None, type(e).__name__)
            logger.warning("DynamoDB %s rejected a value: %s", op, err.message)
            raise err from e

    def _items(self, response) -> StoreResult:
        items = response.get("Items", [])
        return StoreResult(
            items=items,
            count=response.get("Count", len(items)),
            metadata=_metadata(response),
        )

    def scan_all(self) -> StoreResult:
        # single page only, no LastEvaluatedKey follow-up
        return self._items(self._call("scan"))

    def query_by_owner(self, user_id) -> StoreResult:
        return self._items(self._call(
            "query",
            KeyConditionExpression=Key(PARTITION_KEY).eq(user_id),
        ))

    def query_by_note_id(self, note_id) -> StoreResult:
        return self._items(self._call(
            "query",
            IndexName=self.index_name,
            KeyConditionExpression=Key("note_id").eq(note_id),
        ))

    def put_if_absent(self, item) -> StoreResult:
        response = self._call(
            "put_item",
            Item=item,
            ConditionExpression=Attr(PARTITION_KEY).not_exists(),
        )
        return StoreResult(metadata=_metadata(response), item=item)

    def update_fields(self, key, fields, note_id=None) -> StoreResult:
        """
        Set the named attributes on an existing item and return the item
        as it reads after the update.
        """
        names = {f"#{name}": name for name in fields}
        values = {f":{name}": value for name, value in fields.items()}
        expression = "SET " + ", ".join(f"#{name} = :{name}" for name in fields)

        response = self._call(
            "update_item",
            Key=key,
            UpdateExpression=expression,
            ExpressionAttributeNames=names,
            ExpressionAttributeValues=values,
            ConditionExpression=_guard(note_id),
            ReturnValues="ALL_NEW",
        )
        return StoreResult(metadata=_metadata(response), item=response.get("Attributes"))

    def delete_if_present(self, key, note_id=None) -> StoreResult:
        response = self._call(
            "delete_item",
            Key=key,
            ConditionExpression=_guard(note_id),
            ReturnValues="ALL_OLD",
        )
        return StoreResult(metadata=_metadata(response), item=response.get("Attributes"))
