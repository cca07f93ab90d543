"""
JSON File State Store

The whole AppState is written as one JSON document in the persisted
camelCase layout.

CRITICAL: Saves are synchronous and atomic. The new content is written to
a temporary file in the same directory, fsynced, then moved over the old
file with os.replace, so a crash leaves either the old or the new state.
"""

import os
import tempfile
from pathlib import Path
from typing import Callable, Optional, Union

import structlog
from pydantic import ValidationError

from lawdesk.models.practice import AppState
from lawdesk.services.storage.interface import StateStoreInterface, StateWriteError


logger = structlog.get_logger(__name__)

LoadFailureHandler = Callable[[str, str], None]


class JsonFileStateStore(StateStoreInterface):
    """Durable store backed by a single local JSON file."""

    def __init__(
        self,
        path: Union[str, Path],
        on_load_failure: Optional[LoadFailureHandler] = None,
    ):
        self._path = Path(path)
        self._on_load_failure = on_load_failure

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> AppState:
        """Read the stored state; missing or unreadable files give the default state."""
        if not self._path.exists():
            logger.info("state_file_missing", path=str(self._path))
            return AppState()

        try:
            text = self._path.read_text(encoding="utf-8")
            state = AppState.from_json(text)
        except (OSError, ValueError, ValidationError) as e:
            logger.warning(
                "state_file_unreadable",
                path=str(self._path),
                error=str(e),
            )
            if self._on_load_failure is not None:
                self._on_load_failure(str(self._path), str(e))
            return AppState()

        logger.info(
            "state_loaded",
            path=str(self._path),
            clients=len(state.clients),
            pjs_records=len(state.pjs_records),
            inventory=len(state.inventory),
        )
        return state

    def save(self, state: AppState) -> None:
        """Write the full state atomically."""
        payload = state.to_json()
        directory = self._path.parent
        tmp_name = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                dir=str(directory),
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self._path)
            tmp_name = None
        except OSError as e:
            raise StateWriteError(f"Failed to save state to {self._path}: {e}")
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)

        logger.debug("state_saved", path=str(self._path), bytes=len(payload))
