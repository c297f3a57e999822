"""Configuration and result handling shared by CLI commands."""

import datetime as dt
from typing import Any, Optional, Tuple

import click

from tickbooks.api import ClientOptions, OperationResult, ResultStatus
from tickbooks.cli.error_handlers import ClientMatchError, JoinStoreError
from tickbooks.config.settings import TickbooksConfig, get_config
from tickbooks.models.credentials import CredentialSet
from tickbooks.services.join_store import JsonFileJoinRecordStore


def load_session() -> Tuple[TickbooksConfig, CredentialSet, ClientOptions]:
    """Read configuration and derive credentials and client options from it."""
    config = get_config()
    return config, config.get_credentials(), ClientOptions.from_config(config)


def open_store(config: TickbooksConfig) -> JsonFileJoinRecordStore:
    try:
        return JsonFileJoinRecordStore(config.join_store_file)
    except (OSError, ValueError) as e:
        raise JoinStoreError(
            str(e),
            recovery_hint=f"Fix or move {config.join_store_file} (JOIN_STORE_PATH)",
        ) from e


def unwrap(result: OperationResult) -> Any:
    """
    Return the value of a successful result.

    Raises:
        RemoteError: For remote_error results
        ClientMatchError: For no_match results
    """
    if result.status is ResultStatus.REMOTE_ERROR:
        raise result.error
    if result.status is ResultStatus.NO_MATCH:
        raise ClientMatchError(
            result.message,
            recovery_hint="Rename the client or project in Tick or FreshBooks so both match",
        )
    return result.value


def to_date(value: Optional[dt.datetime]) -> Optional[dt.date]:
    """click.DateTime yields datetimes; Tick ranges are whole days."""
    return value.date() if value is not None else None


def debug_enabled(ctx: click.Context) -> bool:
    return bool((ctx.obj or {}).get("debug", False))
