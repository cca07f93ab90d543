"""
JSON Backup and Restore

A backup is the full AppState in its persisted camelCase layout.

CRITICAL: parse_backup either returns a complete, valid AppState or
raises BackupFormatError. The caller replaces its state only on success,
so a bad file leaves the current data exactly as it was.
"""

import json
from datetime import date
from typing import Optional, Union

from pydantic import ValidationError

from lawdesk.models.practice import AppState
from lawdesk.transfer.errors import BackupFormatError


REQUIRED_ARRAYS = ("clients", "pjsRecords")


def backup_filename(today: Optional[date] = None) -> str:
    return f"HMA_Backup_{(today or date.today()).isoformat()}.json"


def export_backup(state: AppState) -> str:
    """Serialize the full state for download."""
    return state.to_json()


def parse_backup(content: Union[str, bytes]) -> AppState:
    """
    Parse and validate a backup file.

    The payload must be a JSON object with `clients` and `pjsRecords`
    arrays and must validate as an AppState.

    Raises:
        BackupFormatError: anything else
    """
    try:
        payload = json.loads(content)
    except (ValueError, UnicodeDecodeError) as e:
        raise BackupFormatError(f"Backup is not valid JSON: {e}")

    if not isinstance(payload, dict):
        raise BackupFormatError("Backup must be a JSON object")

    for key in REQUIRED_ARRAYS:
        if not isinstance(payload.get(key), list):
            raise BackupFormatError(f"Backup is missing the '{key}' list")

    try:
        return AppState.model_validate(payload)
    except ValidationError as e:
        raise BackupFormatError(
            f"Backup failed validation with {e.error_count()} errors: {e.errors()[0]['msg']}"
        )
