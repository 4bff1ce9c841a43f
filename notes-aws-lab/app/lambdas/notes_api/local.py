# app/lambdas/notes_api/local.py
"""
Local development server for the Notes API.

Serves the same routes as the deployed API Gateway by turning each Flask
request into an HTTP API (v2) proxy event and handing it to the Lambda
dispatcher.

Example usage:
  # DynamoDB Local on port 8000, table "notes" already created
  notes-api-local --table notes --endpoint-url http://localhost:8000

  curl -X POST -H "Content-Type: application/json" \
       --data '{"user_id": "u1", "user_name": "Al", "title": "T", "body": "B"}' \
       http://localhost:8080/notes
"""
import argparse
import logging
from dataclasses import replace

from flask import Flask, Response, request

from .config import Settings
from .handler import NotesApi, dispatch
from .store import NotesStore

logger = logging.getLogger(__name__)


def to_event(req) -> dict:
    """Build an API Gateway v2 proxy event from a Flask request."""
    body = req.get_data(as_text=True)
    return {
        "version": "2.0",
        "rawPath": req.path,
        "rawQueryString": req.query_string.decode("utf-8"),
        "headers": {k.lower(): v for k, v in req.headers.items()},
        "queryStringParameters": req.args.to_dict() or None,
        "requestContext": {"http": {"method": req.method, "path": req.path}},
        "body": body or None,
        "isBase64Encoded": False,
    }


def create_app(notes_api: NotesApi) -> Flask:
    app = Flask(__name__)

    @app.route("/notes", methods=["GET", "POST", "OPTIONS"])
    @app.route("/notes/<path:rest>", methods=["GET", "PUT", "DELETE", "OPTIONS"])
    def notes(rest=None):
        result = dispatch(notes_api, to_event(request))
        return Response(
            result.get("body", ""),
            status=result["statusCode"],
            headers=result.get("headers") or {},
        )

    return app


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run the Notes API locally")
    parser.add_argument("--host", default="127.0.0.1", help="Bind address (default 127.0.0.1)")
    parser.add_argument("--port", default=8080, type=int, help="Port (default 8080)")
    parser.add_argument("--table", help="DynamoDB table name (default $NOTES_TABLE)")
    parser.add_argument("--region", help="AWS region (default $AWS_REGION)")
    parser.add_argument("--endpoint-url", help="DynamoDB endpoint, e.g. DynamoDB Local")
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    overrides = {
        "table_name": args.table,
        "region": args.region,
        "endpoint_url": args.endpoint_url,
    }
    settings = replace(settings, **{k: v for k, v in overrides.items() if v})

    logging.basicConfig(level=settings.log_level)
    app = create_app(NotesApi(NotesStore.from_settings(settings)))

    logger.info("Notes API listening on http://%s:%s (table %s)", args.host, args.port, settings.table_name)
    app.run(host=args.host, port=args.port, threaded=True)


if __name__ == "__main__":
    main()
