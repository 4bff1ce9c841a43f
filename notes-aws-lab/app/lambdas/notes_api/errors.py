# app/lambdas/notes_api/errors.py
from botocore.exceptions import BotoCoreError, ClientError

# Every unclassified failure is reported as 404 unless the store says otherwise.
DEFAULT_ERROR_STATUS = 404

CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"


class NotesError(Exception):
    status_code = DEFAULT_ERROR_STATUS

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(NotesError):
    """Required fields are missing or the body cannot be read."""

    def __init__(self, message="Some fields are missing"):
        super().__init__(message, DEFAULT_ERROR_STATUS)


class NotFoundError(NotesError):
    def __init__(self, message="Note not found"):
        super().__init__(message, DEFAULT_ERROR_STATUS)


class StoreError(NotesError):
    """
    DynamoDB rejected or failed a call.
    Carries the HTTP status the service reported, falling back to 404.
    """

    def __init__(self, message, status_code=None, code=None):
        super().__init__(message, status_code or DEFAULT_ERROR_STATUS)
        self.code = code

    @classmethod
    def from_client_error(cls, err: ClientError) -> "StoreError":
        error = err.response.get("Error", {})
        code = error.get("Code")
        message = error.get("Message") or str(err)
        status = err.response.get("ResponseMetadata", {}).get("HTTPStatusCode")

        if code == CONDITIONAL_CHECK_FAILED:
            return ConditionalCheckFailed(message, status)
        return cls(message, status, code)

    @classmethod
    def from_botocore_error(cls, err: BotoCoreError) -> "StoreError":
        return cls(str(err), None, type(err).__name__)


class ConditionalCheckFailed(StoreError):
    """The existence guard on a conditional write did not hold."""

    def __init__(self, message="The conditional request failed", status_code=None):
        super().__init__(message, status_code, CONDITIONAL_CHECK_FAILED)
