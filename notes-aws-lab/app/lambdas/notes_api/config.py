# app/lambdas/notes_api/config.py
import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_TABLE_NAME = "notes"
DEFAULT_INDEX_NAME = "note_id-glo-index"


@dataclass(frozen=True)
class Settings:
    """
    Runtime settings for the Notes API.
    Built once per cold start and handed to the store and handlers.
    """
    table_name: str = DEFAULT_TABLE_NAME
    region: Optional[str] = None
    index_name: str = DEFAULT_INDEX_NAME
    log_level: str = "INFO"
    endpoint_url: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            table_name=env.get("NOTES_TABLE", DEFAULT_TABLE_NAME),
            region=env.get("AWS_REGION") or None,
            index_name=env.get("NOTES_INDEX", DEFAULT_INDEX_NAME),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            endpoint_url=env.get("DYNAMODB_ENDPOINT") or None,
        )
