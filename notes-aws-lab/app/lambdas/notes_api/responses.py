# app/lambdas/notes_api/responses.py
import json
from decimal import Decimal

HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
}


def _json_default(o):
    # DynamoDB hands numbers back as Decimal
    if isinstance(o, Decimal):
        return int(o) if o % 1 == 0 else float(o)
    raise TypeError(f"Object of type {type(o).__name__} is not JSON serializable")


def _format(status_code, payload):
    return {
        "statusCode": status_code,
        "headers": dict(HEADERS),
        "body": json.dumps(payload, indent=2, default=_json_default),
    }


def send_response(data, status_code=200):
    """Success envelope: {statusCode, data}."""
    status_code = status_code or 200
    return _format(status_code, {"statusCode": status_code, "data": data})


def send_error(error, status_code=500):
    """Error envelope: {statusCode, error}."""
    status_code = status_code or 500
    return _format(status_code, {"statusCode": status_code, "error": error or "Server Error"})


def send_empty(status_code=204):
    return {"statusCode": status_code, "headers": dict(HEADERS), "body": ""}
