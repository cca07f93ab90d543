"""
Tests for the PracticeController.

Every command runs against in-memory fakes (see conftest.py). The
properties checked here are the ones the UI relies on:
- a rejected command leaves state and counter untouched
- every accepted command is saved before it becomes current
- timers run once, after the latest request, and can be cancelled
- the remote mirror can never fail a command
"""

from decimal import Decimal

import pytest

from lawdesk.audit import AuditLogger
from lawdesk.models.audit import AuditEventType
from lawdesk.models.document import DocumentType, DraftItem, Parties, PrintMode
from lawdesk.models.practice import AppState, Client, PageId, ThemeMode
from lawdesk.orchestrator import PracticeController
from lawdesk.services.storage import InMemoryAuditStorage, RecordKind, StateWriteError
from lawdesk.transfer import BackupFormatError, TransferFormatError
from lawdesk.validation import EmptyItemListError, MissingCustomerError

from conftest import FailingMirror, InMemoryStateStore


ITEMS = [
    DraftItem(name="A", price="10", quantity=2),
    DraftItem(name="B", price="5"),
]


def event_types(audit_storage):
    return [event.event_type for event in audit_storage.get_recent_events()]


class TestClients:

    def test_register_persists_and_mirrors(self, controller, store, mirror, fee):
        client = controller.register_client("Siti", "Fasakh", fee)

        assert controller.state.clients == [client]
        assert store.last_saved is controller.state
        assert controller.client_balance(client.id) == Decimal("1500.00")
        assert mirror.pushes == [
            (RecordKind.GUAMAN, {"name": "SITI", "detail": "FASAKH", "balance": Decimal("1500.00")})
        ]

    def test_register_blank_name_changes_nothing(self, controller, store):
        with pytest.raises(ValueError):
            controller.register_client("  ")
        assert controller.state.clients == []
        assert store.saved == []

    def test_ledger_entries(self, controller, fee):
        client = controller.register_client("Siti", initial_fee=fee)
        controller.add_ledger_entry(client.id, "Bayaran", "-500", entry_date="2024-02-01")
        entry = controller.add_ledger_entry(client.id, "Caj", "20")

        assert controller.client_balance(client.id) == Decimal("1020.00")

        controller.delete_ledger_entry(client.id, entry.id)
        assert controller.client_balance(client.id) == Decimal("1000.00")

        controller.delete_ledger_entry_at(client.id, 0)
        assert controller.client_balance(client.id) == Decimal("-500.00")

    def test_delete_position_out_of_range(self, controller):
        client = controller.register_client("Siti")
        with pytest.raises(IndexError):
            controller.delete_ledger_entry_at(client.id, 5)

    def test_delete_client_clears_selection(self, controller):
        client = controller.register_client("Siti")
        controller.open_ledger(client.id)

        controller.delete_client(client.id)

        assert controller.state.clients == []
        assert controller.state.active_client_idx is None

    def test_failed_save_keeps_old_state(self, controller, store):
        before = controller.state
        store.fail_saves = True

        with pytest.raises(StateWriteError):
            controller.register_client("Siti")

        assert controller.state is before


class TestCloseLedger:

    def test_close_runs_once_after_latest_request(self, controller, scheduler):
        client = controller.register_client("Siti")
        controller.open_ledger(client.id)

        controller.request_close_ledger()
        scheduler.advance(200)
        controller.request_close_ledger()
        scheduler.advance(200)

        assert controller.state.active_client_idx == 0
        assert controller.is_closing_ledger

        scheduler.advance(100)

        assert controller.state.active_client_idx is None
        assert not controller.is_closing_ledger
        assert scheduler.fired_count == 1

    def test_reopen_cancels_close(self, controller, scheduler):
        first = controller.register_client("Siti")
        second = controller.register_client("Ali")
        controller.open_ledger(first.id)
        controller.request_close_ledger()

        controller.open_ledger(second.id)
        scheduler.advance(1000)

        assert controller.state.active_client is not None
        assert controller.state.active_client.id == second.id

    def test_close_without_open_ledger_is_noop(self, controller, scheduler):
        controller.request_close_ledger()
        assert scheduler.pending_count == 0

    def test_close_already_running_spares_reopened_ledger(self, controller):
        """A timer thread that got past cancellation must not close a reopened ledger."""
        client = controller.register_client("Siti")
        controller.open_ledger(client.id)
        controller.request_close_ledger()

        controller.open_ledger(client.id)
        controller._finish_close_ledger()

        assert controller.state.active_client_idx == 0
        assert not controller.is_closing_ledger

    def test_failed_save_on_close_is_audited(self, controller, scheduler, store, audit_storage):
        client = controller.register_client("Siti")
        controller.open_ledger(client.id)
        controller.request_close_ledger()
        store.fail_saves = True

        scheduler.advance(300)

        assert controller.state.active_client_idx == 0
        assert not controller.is_closing_ledger
        assert AuditEventType.STATE_SAVE_FAILED in event_types(audit_storage)


class TestRecords:

    def test_pjs_add_appends_and_mirrors(self, controller, mirror):
        first = controller.add_pjs_record("Ali", "30", "Akuan", record_date="2024-01-02")
        second = controller.add_pjs_record("Abu", "15")

        assert controller.state.pjs_records == [first, second]
        kind, fields = mirror.pushes[0]
        assert kind is RecordKind.PJS
        assert fields["name"] == "ALI"
        assert fields["date"] == "2024-01-02"

    def test_delete_pjs_is_by_id(self, controller):
        first = controller.add_pjs_record("Ali", "30")
        second = controller.add_pjs_record("Abu", "15")

        controller.delete_pjs_record(first.id)

        assert controller.state.pjs_records == [second]

    def test_services(self, controller):
        service = controller.add_service("Akuan Berkanun", "20")
        assert controller.state.inventory == [service]

        controller.delete_service(service.id)
        assert controller.state.inventory == []

    def test_mirror_failure_does_not_fail_command(self, store, scheduler, app_settings, firm):
        audit_storage = InMemoryAuditStorage()
        controller = PracticeController(
            store=store,
            mirror=FailingMirror(),
            audit_logger=AuditLogger(audit_storage),
            scheduler=scheduler,
            app_settings=app_settings,
            firm=firm,
        )

        record = controller.add_pjs_record("Ali", "30")

        assert controller.state.pjs_records == [record]
        assert AuditEventType.MIRROR_PUSH_FAILED in event_types(audit_storage)


class TestBulkReplace:

    def test_replace_length(self, controller):
        controller.register_client("Lama")
        clients = [Client.register(name=f"Klien {i}") for i in range(3)]

        assert controller.replace_clients(clients) == 3
        assert len(controller.state.clients) == 3

    def test_replace_with_empty(self, controller):
        controller.add_pjs_record("Ali", "30")
        assert controller.replace_pjs_records([]) == 0
        assert controller.state.pjs_records == []

    def test_import_csv(self, controller, audit_storage):
        count = controller.import_csv("services", "Name,Price\nAkuan,20\nSumpah,15\n")

        assert count == 2
        assert [service.name for service in controller.state.inventory] == ["Akuan", "Sumpah"]
        assert AuditEventType.COLLECTION_IMPORTED in event_types(audit_storage)

    def test_bad_csv_changes_nothing(self, controller, audit_storage):
        controller.add_service("Akuan", "20")
        before = controller.state

        with pytest.raises(TransferFormatError):
            controller.import_csv("services", "")

        assert controller.state is before
        assert AuditEventType.IMPORT_FAILED in event_types(audit_storage)

    def test_export_csv(self, controller):
        controller.add_service("Akuan", "20")
        assert controller.export_csv("services") == "Name,Price\nAkuan,20.00\n"

    def test_unknown_collection(self, controller):
        with pytest.raises(ValueError):
            controller.export_csv("documents")


class TestBackup:

    def test_restore_replaces_everything(self, controller):
        controller.register_client("Lama")
        backup = AppState(
            clients=[Client.register(name="Baru")],
            inv_counter=42,
            theme=ThemeMode.LIGHT,
        ).to_json()

        restored = controller.restore_backup(backup)

        assert controller.state is restored
        assert [client.name for client in controller.state.clients] == ["BARU"]
        assert controller.state.inv_counter == 42

    def test_missing_pjs_records_rejected(self, controller, store, audit_storage):
        controller.register_client("Siti")
        before_json = controller.state.to_json()
        saves = len(store.saved)

        with pytest.raises(BackupFormatError):
            controller.restore_backup('{"clients": []}')

        assert controller.state.to_json() == before_json
        assert len(store.saved) == saves
        assert AuditEventType.RESTORE_FAILED in event_types(audit_storage)

    def test_backup_round_trip(self, controller, fee):
        controller.register_client("Siti", initial_fee=fee)
        controller.add_pjs_record("Ali", "30")
        backup = controller.backup_json()

        restored = controller.restore_backup(backup)

        assert restored.to_json() == backup


class TestSettings:

    def test_toggle_theme(self, controller):
        assert controller.state.theme is ThemeMode.DARK
        assert controller.toggle_theme() is ThemeMode.LIGHT
        assert controller.state.theme is ThemeMode.LIGHT

    def test_set_page(self, controller):
        controller.set_page(PageId.PJS)
        assert controller.state.current_page is PageId.PJS

    def test_clear_logo(self, controller):
        controller.clear_logo()
        assert controller.state.firm_logo is None


class TestDocuments:

    def test_counter_advances_per_document(self, controller):
        refs = []
        for kind in (DocumentType.RECEIPT, DocumentType.INVOICE, DocumentType.QUOTATION):
            refs.append(controller.generate_document(kind, Parties(customer="SITI"), ITEMS).doc_no)

        assert controller.state.inv_counter == 4
        suffixes = [int(ref.split("-")[1]) for ref in refs]
        assert suffixes == sorted(set(suffixes))

    def test_quantity_rule_total(self, controller):
        document = controller.generate_document(
            DocumentType.RECEIPT, Parties(customer="SITI"), ITEMS
        )
        assert document.total == Decimal("25.00")
        assert document.lines[0].label == "A (x2)"

    def test_missing_customer_keeps_counter(self, controller, store, audit_storage):
        saves = len(store.saved)

        with pytest.raises(MissingCustomerError):
            controller.generate_document(DocumentType.RECEIPT, Parties(customer=""), ITEMS)

        assert controller.state.inv_counter == 1
        assert len(store.saved) == saves
        assert controller.shown_document is None
        assert AuditEventType.DOCUMENT_REJECTED in event_types(audit_storage)

    def test_empty_items_keeps_counter(self, controller):
        with pytest.raises(EmptyItemListError):
            controller.generate_document(DocumentType.INVOICE, Parties(customer="SITI"), [])
        assert controller.state.inv_counter == 1

    def test_statement_does_not_advance_counter(self, controller, fee):
        client = controller.register_client("Siti", initial_fee=fee)
        controller.generate_document(DocumentType.RECEIPT, Parties(customer="SITI"), ITEMS)

        statement = controller.generate_statement(client.id)

        assert controller.state.inv_counter == 2
        assert statement.doc_no.startswith("STMT-")
        assert statement.total == Decimal("1500.00")

    def test_party_contact_filled_from_client(self, controller):
        controller.register_client("Siti", phone="012-3456789")
        document = controller.generate_document(
            DocumentType.INVOICE, Parties(customer="siti"), ITEMS
        )
        assert document.customer_phone == "012-3456789"

    def test_preview_changes_nothing(self, controller, store):
        preview = controller.next_reference_preview(DocumentType.RECEIPT)

        assert preview.startswith("RES-")
        assert preview.endswith("0001")
        assert store.saved == []

    def test_documents_not_mirrored_by_default(self, controller, mirror):
        controller.generate_document(DocumentType.RECEIPT, Parties(customer="SITI"), ITEMS)
        assert mirror.pushes == []

    def test_documents_mirrored_when_enabled(self, store, mirror, scheduler, firm, app_settings):
        settings = app_settings.model_copy(update={"mirror_documents": True})
        controller = PracticeController(
            store=store, mirror=mirror, scheduler=scheduler, app_settings=settings, firm=firm
        )

        controller.generate_document(DocumentType.INVOICE, Parties(customer="SITI"), ITEMS)
        controller.generate_document(DocumentType.QUOTATION, Parties(customer="SITI"), ITEMS)

        assert [kind for kind, _ in mirror.pushes] == [RecordKind.DOCUMENT]
        assert mirror.pushes[0][1]["total"] == Decimal("25.00")

    def test_render_shown_document(self, controller, firm):
        assert controller.render_shown_document() is None
        controller.generate_document(
            DocumentType.RECEIPT, Parties(customer="SITI"), ITEMS, print_mode=PrintMode.THERMAL
        )
        html = controller.render_shown_document()
        assert "80mm" in html
        assert firm.name in html


class TestAutoPrint:

    def test_auto_print_fires_after_delay(self, controller, scheduler, printed):
        document = controller.generate_document(
            DocumentType.RECEIPT, Parties(customer="SITI"), ITEMS, auto_print=True
        )
        assert controller.print_pending

        scheduler.advance(599)
        assert printed == []

        scheduler.advance(1)
        assert printed == [document]
        assert controller.printed_documents == [document.doc_no]
        assert not controller.print_pending

    def test_dismiss_cancels_print(self, controller, scheduler, printed):
        controller.generate_document(
            DocumentType.RECEIPT, Parties(customer="SITI"), ITEMS, auto_print=True
        )

        controller.dismiss_document()
        scheduler.advance(1000)

        assert printed == []
        assert controller.shown_document is None

    def test_no_auto_print_without_flag(self, controller, scheduler, printed):
        controller.generate_document(DocumentType.RECEIPT, Parties(customer="SITI"), ITEMS)
        scheduler.advance(1000)
        assert printed == []


class TestSharing:

    def test_share_link_round_trip(self, controller):
        record = controller.add_pjs_record("Ali", "30", "Akuan")
        url, text = controller.share_link(record.id, "https://desk.example/app")

        fragment = url.split("#", 1)[1]
        shared = controller.open_shared_record(fragment)

        assert shared == record
        assert controller.shared_record == record
        assert text == "Rekod PJS: ALI - RM 30.00 (AKUAN)"

    def test_shared_record_not_added(self, controller):
        record = controller.add_pjs_record("Ali", "30")
        url, _ = controller.share_link(record.id, "https://desk.example/")
        controller.replace_pjs_records([])

        controller.open_shared_record("#" + url.split("#", 1)[1])

        assert controller.state.pjs_records == []

    def test_malformed_token(self, controller, audit_storage):
        assert controller.open_shared_record("#share-pjs=not-a-token!!") is None
        assert controller.shared_record is None
        assert AuditEventType.SHARE_TOKEN_REJECTED in event_types(audit_storage)

    def test_other_fragment_ignored(self, controller):
        assert controller.open_shared_record("#section-2") is None

    def test_dismiss_shared_record(self, controller):
        record = controller.add_pjs_record("Ali", "30")
        url, _ = controller.share_link(record.id, "https://desk.example/")
        controller.open_shared_record(url.split("#", 1)[1])

        controller.dismiss_shared_record()

        assert controller.shared_record is None


class TestLifecycle:

    def test_loads_initial_state(self, scheduler, app_settings, firm):
        initial = AppState(clients=[Client.register(name="Siti")], inv_counter=9)
        controller = PracticeController(
            store=InMemoryStateStore(initial),
            scheduler=scheduler,
            app_settings=app_settings,
            firm=firm,
        )

        assert controller.state is initial
        assert controller.next_reference_preview(DocumentType.RECEIPT).endswith("0009")

    def test_close_stops_mirror(self, controller, mirror):
        controller.close()
        assert mirror.closed

    def test_recent_activity_newest_first(self, controller):
        controller.register_client("Siti")
        controller.add_service("Akuan", "20")

        events = controller.recent_activity()

        assert events[0].event_type is AuditEventType.SERVICE_ADDED
        assert events[1].event_type is AuditEventType.CLIENT_REGISTERED
