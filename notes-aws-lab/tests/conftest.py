# tests/conftest.py
"""Shared fixtures: an in-memory stand-in for the notes DynamoDB table."""
import copy
import itertools

import pytest
from botocore.exceptions import ClientError

from notes_api.handler import NotesApi
from notes_api.store import NotesStore

INDEX_NAME = "note_id-glo-index"


def conditional_check_failed(operation):
    return ClientError(
        {
            "Error": {
                "Code": "ConditionalCheckFailedException",
                "Message": "The conditional request failed",
            },
            "ResponseMetadata": {"HTTPStatusCode": 400, "RequestId": "req-failed"},
        },
        operation,
    )


def _matches(condition, item):
    expr = condition.get_expression()
    op, values = expr["operator"], expr["values"]
    if op == "AND":
        return all(_matches(v, item) for v in values)
    if op == "attribute_exists":
        return item is not None and values[0].name in item
    if op == "attribute_not_exists":
        return item is None or values[0].name not in item
    if op == "=":
        return item is not None and item.get(values[0].name) == values[1]
    raise NotImplementedError(op)


class FakeTable:
    """
    Enough of a boto3 Table resource for the notes store: evaluates the
    Key/Attr condition objects and SET update expressions it is given.
    """

    def __init__(self):
        self.items = {}
        self._request_ids = itertools.count(1)

    def _response(self, **extra):
        extra["ResponseMetadata"] = {
            "HTTPStatusCode": 200,
            "RequestId": f"req-{next(self._request_ids)}",
            "RetryAttempts": 0,
        }
        return extra

    @staticmethod
    def _key(key):
        return key["user_id"], key["timestamp"]

    def _check(self, operation, condition, existing):
        if condition is not None and not _matches(condition, existing):
            raise conditional_check_failed(operation)

    def scan(self):
        items = [copy.deepcopy(i) for i in self.items.values()]
        return self._response(Items=items, Count=len(items), ScannedCount=len(items))

    def query(self, KeyConditionExpression, IndexName=None):
        expr = KeyConditionExpression.get_expression()
        name, value = expr["values"][0].name, expr["values"][1]
        if name == "note_id":
            assert IndexName == INDEX_NAME
        items = [copy.deepcopy(i) for i in self.items.values() if i.get(name) == value]
        return self._response(Items=items, Count=len(items), ScannedCount=len(items))

    def put_item(self, Item, ConditionExpression=None):
        key = self._key(Item)
        self._check("PutItem", ConditionExpression, self.items.get(key))
        self.items[key] = copy.deepcopy(Item)
        return self._response()

    def update_item(self, Key, UpdateExpression, ExpressionAttributeNames,
                    ExpressionAttributeValues, ConditionExpression=None, ReturnValues="NONE"):
        key = self._key(Key)
        existing = self.items.get(key)
        self._check("UpdateItem", ConditionExpression, existing)

        item = existing if existing is not None else dict(Key)
        assert UpdateExpression.startswith("SET ")
        for assignment in UpdateExpression[len("SET "):].split(", "):
            name, value = assignment.split(" = ")
            item[ExpressionAttributeNames[name]] = ExpressionAttributeValues[value]
        self.items[key] = item

        if ReturnValues == "ALL_NEW":
            return self._response(Attributes=copy.deepcopy(item))
        return self._response()

    def delete_item(self, Key, ConditionExpression=None, ReturnValues="NONE"):
        key = self._key(Key)
        existing = self.items.get(key)
        self._check("DeleteItem", ConditionExpression, existing)

        old = self.items.pop(key, None)
        if ReturnValues == "ALL_OLD" and old is not None:
            return self._response(Attributes=old)
        return self._response()


@pytest.fixture
def table():
    return FakeTable()


@pytest.fixture
def store(table):
    return NotesStore(table, INDEX_NAME)


@pytest.fixture
def api(store):
    return NotesApi(store)
