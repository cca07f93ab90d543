"""
Mirror Wrappers

NullMirror is used when spreadsheet sync is not configured.
BackgroundMirror runs pushes on one worker thread so a slow or failing
remote never blocks or fails a command.

CRITICAL: A failed push is logged and dropped. It is never retried and
never surfaces to the caller.
"""

from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional

import structlog

from lawdesk.services.storage.interface import RecordKind, RemoteMirrorInterface


logger = structlog.get_logger(__name__)

FailureHandler = Callable[[RecordKind, Exception], None]


class NullMirror(RemoteMirrorInterface):
    """Mirror that discards every record."""

    def push_record(self, kind: RecordKind, fields: dict[str, Any]) -> None:
        logger.debug("mirror_disabled", kind=kind.value)


class BackgroundMirror(RemoteMirrorInterface):
    """
    Fire-and-forget wrapper around another mirror.

    Pushes are queued in submission order on a single worker thread.
    """

    def __init__(
        self,
        inner: RemoteMirrorInterface,
        on_failure: Optional[FailureHandler] = None,
    ):
        self._inner = inner
        self._on_failure = on_failure
        self._executor = ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix="lawdesk-mirror",
        )

    def push_record(self, kind: RecordKind, fields: dict[str, Any]) -> Future:
        """Queue a push and return immediately."""
        return self._executor.submit(self._push, kind, dict(fields))

    def _push(self, kind: RecordKind, fields: dict[str, Any]) -> bool:
        try:
            self._inner.push_record(kind, fields)
            logger.info("mirror_push_succeeded", kind=kind.value)
            return True
        except Exception as e:
            logger.warning("mirror_push_failed", kind=kind.value, error=str(e))
            if self._on_failure is not None:
                try:
                    self._on_failure(kind, e)
                except Exception as handler_error:
                    logger.error("mirror_failure_handler_failed", error=str(handler_error))
            return False

    def close(self, wait: bool = True) -> None:
        """Stop accepting pushes; optionally wait for queued ones."""
        self._executor.shutdown(wait=wait)
        self._inner.close()
