# app/lambdas/notes_api/handler.py
import base64
import binascii
import json
import logging
import re
import time
import uuid
from decimal import Decimal

from .config import Settings
from .errors import NotesError, NotFoundError, ValidationError
from .responses import send_empty, send_error, send_response
from .store import NotesStore, key_of

settings = Settings.from_env()

logger = logging.getLogger()
logger.setLevel(settings.log_level)

CREATE_FIELDS = ("user_id", "user_name", "title", "body")
UPDATE_FIELDS = ("title", "body")


def _path_param(event, name):
    return (event.get("pathParameters") or {}).get(name)


def _reject_constant(name):
    raise ValueError(f"Unsupported number: {name}")


def _parse_body(event):
    raw = event.get("body")
    if not raw:
        return {}
    try:
        if event.get("isBase64Encoded"):
            raw = base64.b64decode(raw, validate=True).decode("utf-8")
        # DynamoDB takes Decimal, never float
        data = json.loads(raw, parse_float=Decimal, parse_constant=_reject_constant)
    except (ValueError, binascii.Error) as e:
        raise ValidationError(str(e)) from e
    if not isinstance(data, dict):
        raise ValidationError()
    return data


def _require(data, fields):
    missing = [f for f in fields if not data.get(f)]
    if missing:
        logger.info("Rejected request, missing fields: %s", ", ".join(missing))
        raise ValidationError()


def _now_ms():
    return int(time.time() * 1000)


class NotesApi:
    """
    The six note operations. Each takes an API Gateway proxy event and
    returns a proxy result; NotesError of any kind becomes an error envelope.
    """

    def __init__(self, store: NotesStore):
        self.store = store

    def get_notes(self, event):
        try:
            result = self.store.scan_all()
            return send_response({
                "metadata": result.metadata,
                "count": result.count,
                "items": result.items,
            }, 200)
        except NotesError as e:
            return send_error(e.message, e.status_code)

    def get_notes_of_user(self, event):
        try:
            user_id = _path_param(event, "user_id")
            if not user_id:
                raise NotFoundError("User not found")

            result = self.store.query_by_owner(user_id)
            if result.count == 0:
                logger.info("No notes for user %s", user_id)
                raise NotFoundError("User not found")

            return send_response({
                "metadata": result.metadata,
                "count": result.count,
                "items": result.items,
            }, 200)
        except NotesError as e:
            return send_error(e.message, e.status_code)

    def get_note(self, event):
        try:
            result = self._lookup(_path_param(event, "id"))
            return send_response({
                "metadata": result.metadata,
                "item": result.items[0],
            }, 200)
        except NotesError as e:
            return send_error(e.message, e.status_code)

    def create_note(self, event):
        try:
            data = _parse_body(event)
            _require(data, CREATE_FIELDS)

            item = {
                "user_id": data["user_id"],
                "user_name": data["user_name"],
                "note_id": f"{data['user_id']}-{uuid.uuid4()}",
                "timestamp": _now_ms(),
                "title": data["title"],
                "body": data["body"],
            }
            result = self.store.put_if_absent(item)
            logger.info("Created note %s", item["note_id"])

            response = {"metadata": result.metadata}
            if result.metadata.get("httpStatusCode") == 200:
                response["item"] = item
            return send_response(response, 201)
        except NotesError as e:
            return send_error(e.message, e.status_code)

    def update_note(self, event):
        try:
            data = _parse_body(event)
            _require(data, UPDATE_FIELDS)

            # note_id is not the primary key: find the item first, then update by key
            found = self._lookup(_path_param(event, "id")).items[0]
            result = self.store.update_fields(
                key_of(found),
                {"title": data["title"], "body": data["body"]},
                note_id=found["note_id"],
            )
            logger.info("Updated note %s", found["note_id"])
            return send_response({"metadata": result.metadata, "item": result.item}, 200)
        except NotesError as e:
            return send_error(e.message, e.status_code)

    def delete_note(self, event):
        try:
            found = self._lookup(_path_param(event, "id")).items[0]
            result = self.store.delete_if_present(key_of(found), note_id=found["note_id"])
            logger.info("Deleted note %s", found["note_id"])
            return send_response({"metadata": result.metadata, "item": result.item}, 200)
        except NotesError as e:
            return send_error(e.message, e.status_code)

    def _lookup(self, note_id):
        if not note_id:
            raise NotFoundError("Note not found")
        result = self.store.query_by_note_id(note_id)
        if result.count == 0 or not result.items:
            logger.info("Note %s not found", note_id)
            raise NotFoundError("Note not found")
        return result


# Built on first use and kept for warm invocations.
api = None


def _api():
    global api
    if api is None:
        api = NotesApi(NotesStore.from_settings(settings))
    return api


def _log_event(event):
    # bodies carry note contents, keep them out of INFO
    logger.info(
        "Received %s %s",
        event.get("requestContext", {}).get("http", {}).get("method") or event.get("httpMethod"),
        event.get("rawPath") or event.get("path"),
    )
    logger.debug("Received event: %s", json.dumps(event, default=str))


def _entrypoint(operation):
    def entrypoint(event, context):
        _log_event(event)
        return getattr(_api(), operation)(event)

    entrypoint.__name__ = operation
    return entrypoint


get_notes = _entrypoint("get_notes")
get_notes_of_user = _entrypoint("get_notes_of_user")
get_note = _entrypoint("get_note")
create_note = _entrypoint("create_note")
update_note = _entrypoint("update_note")
delete_note = _entrypoint("delete_note")


ROUTES = {
    "/notes": {"GET": "get_notes", "POST": "create_note"},
    "/notes/user/{user_id}": {"GET": "get_notes_of_user"},
    "/notes/{id}": {"GET": "get_note", "PUT": "update_note", "DELETE": "delete_note"},
}

# Checked in order; the user route must win over the bare {id} route.
_PATH_PATTERNS = [
    ("/notes/user/{user_id}", re.compile(r"/notes/user/(?P<user_id>[^/]+)/?$")),
    ("/notes/{id}", re.compile(r"/notes/(?P<id>[^/]+)/?$")),
    ("/notes", re.compile(r"/notes/?$")),
]


def resolve_route(event):
    """
    Work out (method, route template, path parameters) for an HTTP API (v2)
    or REST (v1) proxy event.
    """
    method = (
        event.get("requestContext", {}).get("http", {}).get("method")
        or event.get("httpMethod")
        or "GET"
    ).upper()
    params = dict(event.get("pathParameters") or {})

    route_key = event.get("routeKey") or ""
    template = route_key.split(" ", 1)[-1] if " " in route_key else event.get("resource")
    if template in ROUTES:
        return method, template, params

    path = event.get("rawPath") or event.get("path") or ""
    for template, pattern in _PATH_PATTERNS:
        match = pattern.search(path)
        if match:
            params.update(match.groupdict())
            return method, template, params
    return method, None, params


def dispatch(notes_api, event):
    """Route one proxy event to the matching NotesApi operation."""
    method, template, params = resolve_route(event)

    if method == "OPTIONS":
        return send_empty(204)
    if template is None:
        return send_error("Route not found", 404)

    operation = ROUTES[template].get(method)
    if operation is None:
        return send_error("Method not allowed", 405)

    event = {**event, "pathParameters": params or None}
    return getattr(notes_api, operation)(event)


def lambda_handler(event, context):
    """
    Single-function deployment: every /notes route behind one Lambda.
    """
    _log_event(event)
    return dispatch(_api(), event)
