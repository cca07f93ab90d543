"""
Main Orchestrator for Lawdesk

This module ties together all the components. PracticeController is the
single owner of the AppState; every user action is a command on it:

    command → validate → build new state → persist → audit → mirror

DESIGN DECISION: The controller enforces the boundaries:
- State is replaced, never mutated in place; a rejected command leaves
  the previous state untouched
- Every accepted command is saved to the durable store before it
  becomes the current state
- Remote mirror pushes are fire-and-forget and never fail a command
- Every command is audited

CRITICAL: All commands and timer callbacks run under one re-entrant
lock, so a deferred close-ledger or auto-print never interleaves with
a command.
"""

import threading
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Optional, Sequence, Union
from uuid import UUID

import structlog
from pydantic import ValidationError

from lawdesk.audit import AuditLogger, create_correlation_id
from lawdesk.catalog import append_item, find_by_id, remove_by_id, replace_all
from lawdesk.config import get_settings
from lawdesk.config.settings import AppSettings, FirmSettings
from lawdesk.documents import (
    build_document,
    build_statement,
    next_reference,
    render_document_html,
    resolve_parties,
)
from lawdesk.ledger import add_entry, balance, delete_entry, delete_entry_by_id
from lawdesk.models.audit import AuditEventType
from lawdesk.models.document import (
    DocumentBase,
    DocumentType,
    DraftItem,
    Parties,
    PrintMode,
    StatementDocument,
)
from lawdesk.models.practice import (
    AppState,
    Client,
    LedgerEntry,
    PageId,
    PjsRecord,
    ServiceItem,
    ThemeMode,
    today_iso,
)
from lawdesk.scheduling import DeferredAction, Scheduler, ThreadingScheduler
from lawdesk.services.branding import prepare_logo
from lawdesk.services.storage import (
    BackgroundMirror,
    GoogleSheetsClient,
    GoogleSheetsMirror,
    InMemoryAuditStorage,
    JsonFileStateStore,
    NullMirror,
    RecordKind,
    RemoteMirrorInterface,
    StateStoreInterface,
    StorageError,
)
from lawdesk.transfer import (
    BackupFormatError,
    ShareTokenError,
    TransferFormatError,
    decode_share_token,
    export_backup,
    export_clients_csv,
    export_pjs_csv,
    export_services_csv,
    extract_token_from_fragment,
    parse_backup,
    parse_clients_csv,
    parse_pjs_csv,
    parse_services_csv,
    share_text,
    share_url,
)
from lawdesk.validation import DocumentValidationError


logger = structlog.get_logger(__name__)

Amount = Union[Decimal, float, int, str]

MIRRORED_DOCUMENT_TYPES = (DocumentType.RECEIPT, DocumentType.INVOICE)

COLLECTIONS = ("clients", "pjs", "services")


@dataclass(frozen=True)
class ShownDocument:
    """The document currently on screen."""
    document: DocumentBase
    print_mode: PrintMode = PrintMode.STANDARD
    auto_print: bool = False


class PracticeController:
    """
    Owns the application state and runs every command against it.

    Collaborators are injected; create_app_components() wires the
    production ones.
    """

    def __init__(
        self,
        store: StateStoreInterface,
        mirror: Optional[RemoteMirrorInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        scheduler: Optional[Scheduler] = None,
        app_settings: Optional[AppSettings] = None,
        firm: Optional[FirmSettings] = None,
        on_print: Optional[Callable[[DocumentBase], None]] = None,
    ):
        self._store = store
        self._mirror = mirror or NullMirror()
        self._audit_logger = audit_logger or AuditLogger()
        self._scheduler = scheduler or ThreadingScheduler()
        self._settings = app_settings or get_settings().app
        self._firm = firm or get_settings().firm
        self._on_print = on_print
        self._lock = threading.RLock()

        self._state = store.load()
        self._closing_ledger = False
        self._shown: Optional[ShownDocument] = None
        self._shared_record: Optional[PjsRecord] = None
        self._printed: list[str] = []

        self._close_ledger_action = DeferredAction(
            "close_ledger",
            self._scheduler,
            self._settings.close_ledger_delay_ms,
            self._finish_close_ledger,
        )
        self._auto_print_action = DeferredAction(
            "auto_print",
            self._scheduler,
            self._settings.auto_print_delay_ms,
            self._fire_print,
        )

    # ===== STATE =====

    @property
    def state(self) -> AppState:
        """Current state snapshot. Treat as read-only."""
        return self._state

    @property
    def firm(self) -> FirmSettings:
        return self._firm

    def _commit(self, new_state: AppState) -> AppState:
        """Persist then publish a new state. A failed save leaves the old state current."""
        with self._lock:
            self._store.save(new_state)
            self._state = new_state
            return new_state

    def _update(self, **changes) -> AppState:
        return self._commit(self._state.model_copy(update=changes))

    def _push(self, kind: RecordKind, fields: dict) -> None:
        try:
            self._mirror.push_record(kind, fields)
        except Exception as e:
            # Mirrors are best-effort; a synchronous mirror must not fail the command
            logger.warning("mirror_push_failed", kind=kind.value, error=str(e))
            self._audit_logger.log_mirror_push_failed(kind.value, str(e))

    def _require_client(self, client_id: UUID) -> tuple[int, Client]:
        for index, client in enumerate(self._state.clients):
            if client.id == client_id:
                return index, client
        raise KeyError(f"No client with id {client_id}")

    def _replace_client_at(self, index: int, client: Client) -> AppState:
        clients = list(self._state.clients)
        clients[index] = client
        return self._update(clients=clients)

    # ===== CLIENTS AND LEDGERS =====

    def register_client(
        self,
        name: str,
        detail: str = "",
        initial_fee: Amount = Decimal("0"),
        phone: Optional[str] = None,
        address: Optional[str] = None,
        on: Optional[str] = None,
    ) -> Client:
        """
        Open a new client file seeded with the approved professional fee.

        Raises:
            ValidationError: blank name or malformed fee/date
        """
        with self._lock:
            client = Client.register(
                name=name,
                detail=detail,
                initial_fee=initial_fee,
                phone=phone,
                address=address,
                on=on,
            )
            self._update(clients=append_item(self._state.clients, client))

            fee = client.ledger[0].amt
            self._audit_logger.log_client_registered(client.id, client.name, fee)
            self._push(RecordKind.GUAMAN, {
                "name": client.name,
                "detail": client.detail,
                "balance": balance(client),
            })
            return client

    def delete_client(self, client_id: UUID) -> None:
        """Remove a client and its ledger; closes any open ledger."""
        with self._lock:
            client = find_by_id(self._state.clients, client_id)
            clients = remove_by_id(self._state.clients, client_id)
            self._close_ledger_action.cancel()
            self._closing_ledger = False
            self._update(clients=clients, active_client_idx=None)
            self._audit_logger.log_client_deleted(client_id, client.name)

    def add_ledger_entry(
        self,
        client_id: UUID,
        desc: str,
        amt: Amount,
        entry_date: Optional[str] = None,
    ) -> LedgerEntry:
        """Append a charge (positive) or payment (negative) to a client's ledger."""
        with self._lock:
            index, client = self._require_client(client_id)
            entry = LedgerEntry(date=entry_date or today_iso(), desc=desc, amt=amt)
            self._replace_client_at(index, add_entry(client, entry))
            self._audit_logger.log_ledger_entry(True, client.id, entry.id, entry.desc, entry.amt)
            return entry

    def delete_ledger_entry(self, client_id: UUID, entry_id: UUID) -> None:
        with self._lock:
            index, client = self._require_client(client_id)
            entry = find_by_id(client.ledger, entry_id)
            self._replace_client_at(index, delete_entry_by_id(client, entry_id))
            self._audit_logger.log_ledger_entry(False, client.id, entry_id, entry.desc, entry.amt)

    def delete_ledger_entry_at(self, client_id: UUID, position: int) -> None:
        """
        Delete by position in the ledger as last displayed.

        Only valid against the snapshot the position was read from.
        """
        with self._lock:
            index, client = self._require_client(client_id)
            updated = delete_entry(client, position)
            entry = client.ledger[position]
            self._replace_client_at(index, updated)
            self._audit_logger.log_ledger_entry(False, client.id, entry.id, entry.desc, entry.amt)

    def client_balance(self, client_id: UUID) -> Decimal:
        _, client = self._require_client(client_id)
        return balance(client)

    def open_ledger(self, client_id: UUID) -> Client:
        """Show a client's ledger; cancels a pending close."""
        with self._lock:
            index, client = self._require_client(client_id)
            self._close_ledger_action.cancel()
            self._closing_ledger = False
            self._update(active_client_idx=index)
            return client

    def request_close_ledger(self) -> None:
        """Start the close transition; the selection clears after the delay."""
        with self._lock:
            if self._state.active_client_idx is None:
                return
            self._closing_ledger = True
            self._close_ledger_action.schedule()

    @property
    def is_closing_ledger(self) -> bool:
        return self._closing_ledger

    def _finish_close_ledger(self) -> None:
        with self._lock:
            # Reopened, deleted or restored since the timer started
            if not self._closing_ledger:
                return
            try:
                self._update(active_client_idx=None)
            except StorageError as e:
                logger.error("close_ledger_save_failed", error=str(e))
                self._audit_logger.log_state_save_failed("close_ledger", str(e))
            finally:
                self._closing_ledger = False

    # ===== PJS RECORDS =====

    def add_pjs_record(
        self,
        name: str,
        amount: Amount,
        detail: str = "",
        record_date: Optional[str] = None,
    ) -> PjsRecord:
        with self._lock:
            record = PjsRecord(
                date=record_date or today_iso(),
                name=name,
                detail=detail,
                amount=amount,
            )
            self._update(pjs_records=append_item(self._state.pjs_records, record))
            self._audit_logger.log_record_changed(
                AuditEventType.PJS_RECORD_ADDED, "pjs_record", record.id, record.name
            )
            self._push(RecordKind.PJS, {
                "id": str(record.id),
                "date": record.date,
                "name": record.name,
                "detail": record.detail,
                "amount": record.amount,
            })
            return record

    def delete_pjs_record(self, record_id: UUID) -> None:
        with self._lock:
            record = find_by_id(self._state.pjs_records, record_id)
            self._update(pjs_records=remove_by_id(self._state.pjs_records, record_id))
            self._audit_logger.log_record_changed(
                AuditEventType.PJS_RECORD_DELETED, "pjs_record", record_id, record.name
            )

    # ===== SERVICES =====

    def add_service(self, name: str, price: Amount) -> ServiceItem:
        with self._lock:
            service = ServiceItem(name=name, price=price)
            self._update(inventory=append_item(self._state.inventory, service))
            self._audit_logger.log_record_changed(
                AuditEventType.SERVICE_ADDED, "service", service.id, service.name
            )
            return service

    def delete_service(self, service_id: UUID) -> None:
        with self._lock:
            service = find_by_id(self._state.inventory, service_id)
            self._update(inventory=remove_by_id(self._state.inventory, service_id))
            self._audit_logger.log_record_changed(
                AuditEventType.SERVICE_DELETED, "service", service_id, service.name
            )

    # ===== BULK REPLACE AND CSV =====

    def replace_clients(self, clients: Sequence[Client], source: str = "csv") -> int:
        """Discard every client and install `clients`. Closes any open ledger."""
        with self._lock:
            previous = len(self._state.clients)
            self._close_ledger_action.cancel()
            self._closing_ledger = False
            self._update(
                clients=replace_all(self._state.clients, clients),
                active_client_idx=None,
            )
            self._audit_logger.log_collection_imported("clients", source, previous, len(clients))
            return len(clients)

    def replace_pjs_records(self, records: Sequence[PjsRecord], source: str = "csv") -> int:
        with self._lock:
            previous = len(self._state.pjs_records)
            self._update(pjs_records=replace_all(self._state.pjs_records, records))
            self._audit_logger.log_collection_imported("pjs", source, previous, len(records))
            return len(records)

    def replace_services(self, services: Sequence[ServiceItem], source: str = "csv") -> int:
        with self._lock:
            previous = len(self._state.inventory)
            self._update(inventory=replace_all(self._state.inventory, services))
            self._audit_logger.log_collection_imported("services", source, previous, len(services))
            return len(services)

    def import_csv(self, collection: str, content: Union[str, bytes]) -> int:
        """
        Parse a CSV file and replace the whole collection with it.

        The caller must have confirmed the replacement with the user.

        Raises:
            TransferFormatError: file could not be read; nothing changes
        """
        parsers = {
            "clients": (parse_clients_csv, self.replace_clients),
            "pjs": (parse_pjs_csv, self.replace_pjs_records),
            "services": (parse_services_csv, self.replace_services),
        }
        if collection not in parsers:
            raise ValueError(f"Unknown collection {collection!r}")
        parse, replace = parsers[collection]

        try:
            items = parse(content)
        except TransferFormatError as e:
            self._audit_logger.log_import_failed(collection, str(e))
            raise
        return replace(items, source="csv")

    def export_csv(self, collection: str) -> str:
        state = self._state
        if collection == "clients":
            return export_clients_csv(state.clients)
        if collection == "pjs":
            return export_pjs_csv(state.pjs_records)
        if collection == "services":
            return export_services_csv(state.inventory)
        raise ValueError(f"Unknown collection {collection!r}")

    # ===== BACKUP =====

    def backup_json(self) -> str:
        return export_backup(self._state)

    def restore_backup(self, content: Union[str, bytes]) -> AppState:
        """
        Replace the entire state with a backup.

        Raises:
            BackupFormatError: backup rejected; current state unchanged
        """
        with self._lock:
            try:
                restored = parse_backup(content)
            except BackupFormatError as e:
                self._audit_logger.log_restore_failed(str(e))
                raise

            self._close_ledger_action.cancel()
            self._auto_print_action.cancel()
            self._closing_ledger = False
            self._shown = None
            self._commit(restored)
            self._audit_logger.log_backup_restored(
                len(restored.clients), len(restored.pjs_records)
            )
            return restored

    # ===== SETTINGS =====

    def set_logo(self, image_bytes: bytes) -> str:
        """
        Store a new firm logo.

        Raises:
            LogoError: upload unreadable or too large
        """
        with self._lock:
            data_url = prepare_logo(
                image_bytes,
                max_size_px=self._settings.max_logo_size_px,
                max_upload_bytes=self._settings.max_logo_upload_bytes,
            )
            self._update(firm_logo=data_url)
            self._audit_logger.log_settings_changed("firm_logo", f"{len(data_url)} chars")
            return data_url

    def clear_logo(self) -> None:
        with self._lock:
            self._update(firm_logo=None)
            self._audit_logger.log_settings_changed("firm_logo", "cleared")

    def set_theme(self, theme: ThemeMode) -> None:
        with self._lock:
            self._update(theme=ThemeMode(theme))
            self._audit_logger.log_settings_changed("theme", ThemeMode(theme).value)

    def toggle_theme(self) -> ThemeMode:
        with self._lock:
            theme = ThemeMode.LIGHT if self._state.theme is ThemeMode.DARK else ThemeMode.DARK
            self.set_theme(theme)
            return theme

    def set_page(self, page: PageId) -> None:
        with self._lock:
            self._update(current_page=PageId(page))

    # ===== DOCUMENTS =====

    def next_reference_preview(self, doc_type: DocumentType) -> str:
        """Reference the next document of this type would get. Changes nothing."""
        return next_reference(doc_type, self._state.inv_counter)

    def generate_document(
        self,
        kind: DocumentType,
        parties: Parties,
        items: Sequence[DraftItem],
        notes: Optional[str] = None,
        doc_date: Optional[str] = None,
        auto_print: bool = False,
        print_mode: PrintMode = PrintMode.STANDARD,
    ) -> DocumentBase:
        """
        Build a receipt, invoice or quotation and advance the shared counter.

        Raises:
            MissingCustomerError / EmptyItemListError: nothing changes
        """
        with self._lock:
            correlation_id = create_correlation_id()
            kind = DocumentType(kind)
            resolved = resolve_parties(parties, self._state.clients)
            doc_no = next_reference(kind, self._state.inv_counter)

            try:
                document = build_document(
                    kind,
                    resolved,
                    items,
                    notes,
                    doc_no,
                    doc_date or today_iso(),
                )
            except DocumentValidationError as e:
                self._audit_logger.log_document_rejected(
                    kind.value,
                    [issue.model_dump(include={"field", "issue_type", "message"}) for issue in e.issues],
                    correlation_id=correlation_id,
                )
                raise

            self._update(inv_counter=self._state.inv_counter + 1)
            self._audit_logger.log_document_generated(
                kind.value,
                document.doc_no,
                document.customer,
                document.total,
                len(document.lines),
                correlation_id=correlation_id,
            )
            if self._settings.mirror_documents and kind in MIRRORED_DOCUMENT_TYPES:
                self._push(RecordKind.DOCUMENT, {
                    "doc_type": kind.value,
                    "doc_no": document.doc_no,
                    "date": document.date,
                    "customer": document.customer,
                    "total": document.total,
                })
            self._show(document, auto_print, print_mode)
            return document

    def generate_statement(
        self,
        client_id: UUID,
        start: Optional[str] = None,
        end: Optional[str] = None,
        doc_date: Optional[str] = None,
        auto_print: bool = False,
        print_mode: PrintMode = PrintMode.STANDARD,
    ) -> StatementDocument:
        """Project a client's ledger into a statement. Never touches the counter."""
        with self._lock:
            _, client = self._require_client(client_id)
            doc_no = next_reference(DocumentType.STATEMENT, self._state.inv_counter)
            try:
                document = build_statement(client, doc_no, doc_date or today_iso(), start, end)
            except DocumentValidationError as e:
                self._audit_logger.log_document_rejected(
                    DocumentType.STATEMENT.value,
                    [issue.model_dump(include={"field", "issue_type", "message"}) for issue in e.issues],
                )
                raise
            self._audit_logger.log_document_generated(
                DocumentType.STATEMENT.value,
                document.doc_no,
                document.customer,
                document.total,
                len(document.lines),
            )
            self._show(document, auto_print, print_mode)
            return document

    @property
    def shown_document(self) -> Optional[ShownDocument]:
        return self._shown

    @property
    def print_pending(self) -> bool:
        return self._auto_print_action.pending

    @property
    def printed_documents(self) -> list[str]:
        """Reference numbers sent to print, oldest first."""
        return list(self._printed)

    def _show(self, document: DocumentBase, auto_print: bool, print_mode: PrintMode) -> None:
        self._auto_print_action.cancel()
        self._shown = ShownDocument(
            document=document,
            print_mode=PrintMode(print_mode),
            auto_print=auto_print,
        )
        if auto_print:
            self._auto_print_action.schedule()

    def _fire_print(self) -> None:
        with self._lock:
            if self._shown is None:
                return
            document = self._shown.document
            self._printed.append(document.doc_no)
        logger.info("document_print_requested", doc_no=document.doc_no)
        if self._on_print is not None:
            self._on_print(document)

    def dismiss_document(self) -> None:
        """Close the document view; cancels a pending auto-print."""
        with self._lock:
            self._auto_print_action.cancel()
            self._shown = None

    def render_shown_document(self) -> Optional[str]:
        """HTML page for the shown document, or None."""
        shown = self._shown
        if shown is None:
            return None
        return render_document_html(
            shown.document,
            self._firm,
            logo=self._state.firm_logo,
            print_mode=shown.print_mode,
            currency=self._settings.currency_label,
        )

    # ===== SHARING =====

    def share_link(self, record_id: UUID, base_url: str) -> tuple[str, str]:
        """(url, text) for sharing one PJS record."""
        record = find_by_id(self._state.pjs_records, record_id)
        if record is None:
            raise KeyError(f"No PJS record with id {record_id}")
        return share_url(base_url, record), share_text(record, self._settings.currency_label)

    def open_shared_record(self, fragment: Optional[str]) -> Optional[PjsRecord]:
        """
        Decode a `#share-pjs=` fragment for read-only display.

        Malformed tokens are logged and give None. Other fragments are ignored.
        """
        token = extract_token_from_fragment(fragment)
        if token is None:
            return None
        try:
            record = decode_share_token(token)
        except ShareTokenError as e:
            logger.warning("share_token_rejected", error=str(e))
            self._audit_logger.log_share_token_rejected(str(e))
            return None
        self._shared_record = record
        return record

    @property
    def shared_record(self) -> Optional[PjsRecord]:
        return self._shared_record

    def dismiss_shared_record(self) -> None:
        self._shared_record = None

    # ===== LIFECYCLE =====

    def recent_activity(self, limit: int = 20):
        return self._audit_logger.recent_events(limit=limit)

    def close(self) -> None:
        """Cancel timers and stop the mirror worker."""
        self._close_ledger_action.cancel()
        self._auto_print_action.cancel()
        self._mirror.close()


def create_app_components(
    use_storage: bool = True,
    scheduler: Optional[Scheduler] = None,
) -> PracticeController:
    """
    Factory function to create the application controller.

    Args:
        use_storage: Whether to initialize Google Sheets sync.
                    Set to False to run without the remote mirror.

    Returns:
        A PracticeController with its store, mirror and audit logger wired
    """
    settings = get_settings()
    app_settings = settings.app

    audit_storage = InMemoryAuditStorage(max_events=app_settings.audit_history_size)
    audit_logger = AuditLogger(audit_storage)

    store = JsonFileStateStore(
        app_settings.data_path,
        on_load_failure=audit_logger.log_state_load_failed,
    )

    mirror: RemoteMirrorInterface = NullMirror()
    if use_storage:
        try:
            sheets_client = GoogleSheetsClient(settings.google_sheets)
            mirror = BackgroundMirror(
                GoogleSheetsMirror(sheets_client),
                on_failure=lambda kind, error: audit_logger.log_mirror_push_failed(
                    kind.value, str(error)
                ),
            )
        except (ValidationError, OSError) as e:
            # Sync not configured - continue without it
            logger.warning("mirror_not_configured", error=str(e))

    return PracticeController(
        store=store,
        mirror=mirror,
        audit_logger=audit_logger,
        scheduler=scheduler,
        app_settings=app_settings,
        firm=settings.firm,
    )
