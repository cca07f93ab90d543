"""
Streamlit Frontend for Lawdesk

This is the desk application used at the counter of a small legal
practice: client files and their ledgers (Guaman), notarization records
(PJS), the service price list, and receipt/invoice/quotation printing.

DESIGN PRINCIPLES:
1. Every button maps to exactly one controller command
2. Destructive actions (delete, import, restore) need explicit confirmation
3. Errors are shown in plain language and never lose existing data
4. The generated document is shown on top of whatever page is open

All state lives in the PracticeController; st.session_state only holds
in-progress form drafts.
"""

import time
from datetime import date
from decimal import Decimal, InvalidOperation

import streamlit as st
import streamlit.components.v1 as components
from pydantic import ValidationError

from lawdesk.catalog import display_year, sort_records, total_amount
from lawdesk.config import get_settings, validate_all_settings
from lawdesk.documents import format_amount, print_script
from lawdesk.ledger import LedgerError, balance, filter_by_date_range, running_balances
from lawdesk.models import (
    CASH_CUSTOMER,
    DocumentType,
    DraftItem,
    PageId,
    Parties,
    PrintMode,
    ThemeMode,
)
from lawdesk.orchestrator import PracticeController, create_app_components
from lawdesk.services.branding import LogoError
from lawdesk.services.storage import StorageError
from lawdesk.transfer import (
    TransferError,
    backup_filename,
    export_filename,
    parse_backup,
    parse_clients_csv,
    parse_pjs_csv,
    parse_services_csv,
)
from lawdesk.validation import DocumentValidationError, DocumentValidator


# Page configuration
st.set_page_config(
    page_title="HMA Lawdesk",
    page_icon="⚖️",
    layout="wide",
    initial_sidebar_state="expanded",
)

PAGE_LABELS = {
    PageId.GUAMAN: "⚖️ Guaman",
    PageId.PJS: "🖋️ Rekod PJS",
    PageId.INVENTORY: "📋 Senarai Servis",
    PageId.INVOICE: "🧾 Jana Resit/Inv",
}

DOC_TYPE_LABELS = {
    DocumentType.RECEIPT: "Resit Rasmi",
    DocumentType.INVOICE: "Invois",
    DocumentType.QUOTATION: "Sebutharga",
}

CSV_PARSERS = {
    "clients": parse_clients_csv,
    "pjs": parse_pjs_csv,
    "services": parse_services_csv,
}

THEME_CSS = {
    ThemeMode.DARK: """
<style>
    .stApp { background-color: #0b0b0b; color: #f5f5f5; }
    .gold { color: #FFD700; font-weight: 800; letter-spacing: 1px; }
    .balance-owed { color: #f43f5e; font-weight: bold; }
    .balance-clear { color: #22c55e; font-weight: bold; }
</style>
""",
    ThemeMode.LIGHT: """
<style>
    .gold { color: #a16207; font-weight: 800; letter-spacing: 1px; }
    .balance-owed { color: #be123c; font-weight: bold; }
    .balance-clear { color: #15803d; font-weight: bold; }
</style>
""",
}


@st.cache_resource
def get_controller() -> PracticeController:
    """Get or create the application controller (cached)."""
    try:
        return create_app_components(use_storage=True)
    except Exception as e:
        st.error(f"Failed to initialize spreadsheet sync: {e}")
        return create_app_components(use_storage=False)


def money(value: Decimal) -> str:
    return f"{get_settings().app.currency_label} {format_amount(value)}"


def parse_amount(text: str) -> Decimal:
    """Form amounts: blanks and garbage are rejected, commas allowed."""
    try:
        return Decimal((text or "").replace(",", "").strip())
    except InvalidOperation:
        raise ValueError(f"'{text}' bukan amaun yang sah")


def main():
    """Main application entry point."""
    controller = get_controller()
    state = controller.state

    st.markdown(THEME_CSS[state.theme], unsafe_allow_html=True)

    render_sidebar(controller)
    render_shared_record(controller)
    render_shown_document(controller)

    page = state.current_page
    if page is PageId.GUAMAN:
        render_guaman_page(controller)
    elif page is PageId.PJS:
        render_pjs_page(controller)
    elif page is PageId.INVENTORY:
        render_inventory_page(controller)
    elif page is PageId.INVOICE:
        render_invoice_page(controller)


# =============================================================================
# SIDEBAR
# =============================================================================

def render_sidebar(controller: PracticeController):
    state = controller.state
    firm = controller.firm

    if state.firm_logo:
        st.sidebar.image(state.firm_logo, width=96)
    st.sidebar.markdown(f"<div class='gold'>{firm.name}</div>", unsafe_allow_html=True)
    st.sidebar.caption(firm.tagline)
    st.sidebar.markdown("---")

    pages = list(PAGE_LABELS)
    chosen = st.sidebar.radio(
        "Navigasi",
        pages,
        index=pages.index(state.current_page),
        format_func=lambda page: PAGE_LABELS[page],
    )
    if chosen is not state.current_page:
        controller.set_page(chosen)
        st.rerun()

    st.sidebar.markdown("---")
    theme_label = "☀️ Mod Cerah" if state.theme is ThemeMode.DARK else "🌙 Mod Gelap"
    if st.sidebar.button(theme_label):
        controller.toggle_theme()
        st.rerun()

    with st.sidebar.expander("🖼️ Logo Firma"):
        upload = st.file_uploader("Muat naik logo", type=["png", "jpg", "jpeg", "webp"], key="logo_upload")
        if upload is not None and st.button("Simpan logo"):
            try:
                controller.set_logo(upload.getvalue())
                st.success("Logo disimpan.")
                st.rerun()
            except LogoError as e:
                st.error(str(e))
        if state.firm_logo and st.button("Buang logo"):
            controller.clear_logo()
            st.rerun()

    with st.sidebar.expander("💾 Backup & Restore"):
        st.download_button(
            "Muat turun backup",
            data=controller.backup_json(),
            file_name=backup_filename(),
            mime="application/json",
        )
        restore = st.file_uploader("Restore dari backup", type=["json"], key="restore_upload")
        if restore is not None:
            content = restore.getvalue()
            try:
                preview = parse_backup(content)
            except TransferError as e:
                st.error(f"Fail backup tidak sah: {e}")
            else:
                st.warning(
                    f"Restore {len(preview.clients)} pelanggan dan "
                    f"{len(preview.pjs_records)} rekod PJS? Semua data sedia ada akan diganti."
                )
                if st.button("Sahkan restore"):
                    try:
                        controller.restore_backup(content)
                        st.success("Data dipulihkan.")
                        st.rerun()
                    except (TransferError, StorageError) as e:
                        st.error(str(e))

    with st.sidebar.expander("📜 Aktiviti Terkini"):
        for event in controller.recent_activity(limit=15):
            st.caption(f"{event.timestamp:%H:%M:%S} · {event.description}")

    with st.sidebar.expander("⚙️ Status"):
        status = validate_all_settings()
        for name, key in (("Tetapan aplikasi", "app"), ("Kepala surat", "firm"), ("Google Sheets", "google_sheets")):
            if status.get(key, False):
                st.success(f"✅ {name}")
            else:
                st.error(f"❌ {name} - {status.get(f'{key}_error', 'Not configured')}")


# =============================================================================
# SHARED RECORD AND DOCUMENT OVERLAYS
# =============================================================================

def render_shared_record(controller: PracticeController):
    token = st.query_params.get("share-pjs")
    if token and "shared_token_seen" not in st.session_state:
        st.session_state.shared_token_seen = token
        if controller.open_shared_record(f"#share-pjs={token}") is None:
            st.error("Pautan rekod PJS tidak sah.")

    record = controller.shared_record
    if record is None:
        return
    st.info(
        f"**Rekod PJS Dikongsi**  \n"
        f"{record.date} · {record.name}  \n"
        f"{record.detail}  \n"
        f"**{money(record.amount)}**"
    )
    if st.button("Tutup rekod dikongsi"):
        controller.dismiss_shared_record()
        st.query_params.clear()
        st.rerun()


def render_shown_document(controller: PracticeController):
    shown = controller.shown_document
    if shown is None:
        return

    page_html = controller.render_shown_document()
    if shown.auto_print and not st.session_state.get("printed_" + shown.document.doc_no):
        st.session_state["printed_" + shown.document.doc_no] = True
        page_html = page_html.replace(
            "</body>",
            print_script(get_settings().app.auto_print_delay_ms) + "</body>",
        )

    height = 700 if shown.print_mode is PrintMode.STANDARD else 600
    components.html(page_html, height=height, scrolling=True)

    col1, col2 = st.columns([1, 3])
    with col1:
        if st.button("✖ Tutup dokumen"):
            controller.dismiss_document()
            st.rerun()
    with col2:
        st.download_button(
            "Muat turun HTML",
            data=controller.render_shown_document(),
            file_name=f"{shown.document.doc_no}.html",
            mime="text/html",
        )
    st.markdown("---")


def render_csv_transfer(controller: PracticeController, collection: str, key: str):
    """Export button plus import-with-confirmation for one collection."""
    col1, col2 = st.columns(2)
    with col1:
        st.download_button(
            "⬇️ Export CSV",
            data=controller.export_csv(collection),
            file_name=export_filename(collection),
            mime="text/csv",
            key=f"export_{key}",
        )
    with col2:
        upload = st.file_uploader("⬆️ Import CSV", type=["csv"], key=f"import_{key}")
    if upload is None:
        return

    content = upload.getvalue()
    try:
        items = CSV_PARSERS[collection](content)
    except TransferError:
        st.error("Ralat membaca fail CSV.")
        return

    st.warning(f"Import {len(items)} rekod? Data sedia ada akan diganti.")
    if st.button("Sahkan import", key=f"confirm_import_{key}"):
        try:
            count = controller.import_csv(collection, content)
            st.success(f"{count} rekod diimport.")
            st.rerun()
        except (TransferError, StorageError) as e:
            st.error(str(e))


# =============================================================================
# GUAMAN (CLIENTS AND LEDGERS)
# =============================================================================

def render_guaman_page(controller: PracticeController):
    state = controller.state
    active = state.active_client

    if active is not None:
        render_ledger(controller, active)
        return

    st.title("⚖️ Fail Guaman")

    with st.form("register_client", clear_on_submit=True):
        st.markdown("### Daftar Fail Baru")
        col1, col2 = st.columns(2)
        with col1:
            name = st.text_input("Nama Pelanggan *")
            phone = st.text_input("No. Telefon")
            fee = st.text_input("Fee Professional Dipersetujui (RM)", value="0")
        with col2:
            detail = st.text_input("Butiran Kes")
            address = st.text_area("Alamat", height=80)
        submitted = st.form_submit_button("➕ Daftar")

    if submitted:
        if not name.strip():
            st.error("Nama diperlukan!")
        else:
            try:
                controller.register_client(
                    name=name,
                    detail=detail,
                    initial_fee=parse_amount(fee or "0"),
                    phone=phone,
                    address=address,
                )
                st.rerun()
            except (ValueError, StorageError) as e:
                st.error(str(e))

    render_csv_transfer(controller, "clients", "guaman")

    st.markdown("---")
    if not state.clients:
        st.info("Tiada fail guaman lagi.")
        return

    for client in state.clients:
        owed = balance(client)
        col1, col2, col3, col4 = st.columns([4, 2, 1, 1])
        with col1:
            st.markdown(f"**{client.name}**  \n{client.detail}")
        with col2:
            css = "balance-owed" if owed > 0 else "balance-clear"
            st.markdown(f"<span class='{css}'>{money(owed)}</span>", unsafe_allow_html=True)
        with col3:
            if st.button("📖 Lejar", key=f"open_{client.id}"):
                controller.open_ledger(client.id)
                st.rerun()
        with col4:
            if st.button("🗑️", key=f"delete_{client.id}"):
                st.session_state.confirm_delete_client = client.id

        if st.session_state.get("confirm_delete_client") == client.id:
            st.warning(f"Padam pelanggan {client.name}?")
            if st.button("Ya, padam", key=f"confirm_delete_{client.id}"):
                controller.delete_client(client.id)
                st.session_state.confirm_delete_client = None
                st.rerun()


def render_ledger(controller: PracticeController, client):
    if controller.is_closing_ledger:
        st.caption("Menutup lejar...")

    st.title(f"📖 Lejar: {client.name}")
    st.caption(" · ".join(part for part in (client.detail, client.phone, client.address) if part))

    if st.button("← Kembali"):
        controller.request_close_ledger()
        time.sleep(get_settings().app.close_ledger_delay_ms / 1000.0 + 0.05)
        st.rerun()

    rows = running_balances(client.ledger)
    for position, (entry, running) in enumerate(rows):
        col1, col2, col3, col4, col5 = st.columns([2, 5, 2, 2, 1])
        col1.write(entry.date)
        col2.write(entry.desc)
        col3.write(format_amount(entry.amt))
        col4.write(format_amount(running))
        if col5.button("✖", key=f"del_entry_{entry.id}"):
            try:
                controller.delete_ledger_entry(client.id, entry.id)
                st.rerun()
            except (LedgerError, StorageError) as e:
                st.error(str(e))

    st.markdown(f"### Baki: {money(balance(client))}")

    with st.form("add_entry", clear_on_submit=True):
        st.markdown("#### Tambah Transaksi")
        col1, col2, col3 = st.columns([2, 4, 2])
        entry_date = col1.date_input("Tarikh", value=date.today())
        desc = col2.text_input("Keterangan")
        amt = col3.text_input("Amaun (negatif = bayaran)")
        submitted = st.form_submit_button("➕ Tambah")
    if submitted:
        try:
            controller.add_ledger_entry(
                client.id,
                desc=desc,
                amt=parse_amount(amt),
                entry_date=entry_date.isoformat(),
            )
            st.rerun()
        except (ValueError, StorageError) as e:
            st.error(str(e))

    st.markdown("#### Penyata Akaun")
    col1, col2, col3 = st.columns(3)
    start = col1.date_input("Dari", value=None, key="stmt_start")
    end = col2.date_input("Hingga", value=None, key="stmt_end")
    thermal = col3.checkbox("Cetakan thermal", key="stmt_thermal")
    subset = filter_by_date_range(
        client.ledger,
        start.isoformat() if start else None,
        end.isoformat() if end else None,
    )
    st.caption(f"{len(subset)} transaksi · {money(balance(subset))}")
    if st.button("🖨️ Jana Penyata"):
        controller.generate_statement(
            client.id,
            start=start.isoformat() if start else None,
            end=end.isoformat() if end else None,
            auto_print=True,
            print_mode=PrintMode.THERMAL if thermal else PrintMode.STANDARD,
        )
        st.rerun()


# =============================================================================
# PJS RECORDS
# =============================================================================

def render_pjs_page(controller: PracticeController):
    records = controller.state.pjs_records
    st.title(f"🖋️ Rekod PJS {display_year(records)}")

    with st.form("add_pjs", clear_on_submit=True):
        col1, col2, col3, col4 = st.columns([2, 3, 3, 2])
        record_date = col1.date_input("Tarikh", value=date.today())
        name = col2.text_input("Nama")
        detail = col3.text_input("Butiran")
        amount = col4.text_input("Amaun (RM)")
        submitted = st.form_submit_button("➕ Simpan Rekod")
    if submitted:
        try:
            controller.add_pjs_record(
                name=name,
                amount=parse_amount(amount),
                detail=detail,
                record_date=record_date.isoformat(),
            )
            st.rerun()
        except (ValueError, StorageError) as e:
            st.error(str(e))

    render_csv_transfer(controller, "pjs", "pjs")
    st.markdown("---")

    col1, col2 = st.columns(2)
    sort_key = col1.selectbox("Susun ikut", ["date", "name", "detail", "amount"])
    descending = col2.checkbox("Menurun", value=True)
    ordered = sort_records(records, key=sort_key, descending=descending)

    st.markdown(f"**Jumlah: {money(total_amount(records))}** ({len(records)} rekod)")
    base_url = st.session_state.get("base_url", "http://localhost:8501/")

    for record in ordered:
        col1, col2, col3, col4, col5 = st.columns([2, 3, 3, 2, 2])
        col1.write(record.date)
        col2.write(record.name)
        col3.write(record.detail)
        col4.write(format_amount(record.amount))
        with col5:
            if st.button("🔗", key=f"share_{record.id}"):
                url, text = controller.share_link(record.id, base_url)
                st.code(f"{text}\n{url}")
            if st.button("🗑️", key=f"del_pjs_{record.id}"):
                controller.delete_pjs_record(record.id)
                st.rerun()


# =============================================================================
# SERVICES
# =============================================================================

def render_inventory_page(controller: PracticeController):
    st.title("📋 Senarai Servis")

    with st.form("add_service", clear_on_submit=True):
        col1, col2 = st.columns([3, 1])
        name = col1.text_input("Nama Servis")
        price = col2.text_input("Harga (RM)")
        submitted = st.form_submit_button("➕ Tambah Servis")
    if submitted:
        try:
            controller.add_service(name=name, price=parse_amount(price))
            st.rerun()
        except (ValueError, StorageError) as e:
            st.error(str(e))

    render_csv_transfer(controller, "services", "services")
    st.markdown("---")

    for service in controller.state.inventory:
        col1, col2, col3 = st.columns([4, 2, 1])
        col1.write(service.name)
        col2.write(money(service.price))
        if col3.button("🗑️", key=f"del_service_{service.id}"):
            controller.delete_service(service.id)
            st.rerun()


# =============================================================================
# DOCUMENT GENERATION
# =============================================================================

def render_invoice_page(controller: PracticeController):
    state = controller.state
    validator = DocumentValidator()

    if "draft_items" not in st.session_state:
        st.session_state.draft_items = []

    st.title("🧾 Penyediaan Resit")

    col1, col2, col3 = st.columns(3)
    kind = col1.selectbox(
        "Jenis Dokumen",
        list(DOC_TYPE_LABELS),
        format_func=lambda doc_type: DOC_TYPE_LABELS[doc_type],
    )
    doc_date = col2.date_input("Tarikh Dokumen", value=date.today())
    col3.markdown(f"**No. Dokumen**  \n`{controller.next_reference_preview(kind)}`")

    customers = [""] + [client.name for client in state.clients] + [CASH_CUSTOMER]
    customer = st.selectbox(
        "Pilih Pelanggan / Fail",
        customers,
        format_func=lambda name: "-- Pilih Pelanggan --" if not name else name,
    )
    col1, col2 = st.columns(2)
    phone = col1.text_input("Telefon (pilihan)")
    address = col2.text_input("Alamat (pilihan)")

    services = {f"{s.name} — {money(s.price)}": s for s in state.inventory}
    picked = st.selectbox("+ Pilih perkhidmatan", [""] + list(services))
    if picked and st.button("Tambah ke senarai"):
        st.session_state.draft_items.append(
            DraftItem.from_service(services[picked]).model_dump(mode="json")
        )
        st.rerun()

    edited = st.data_editor(
        st.session_state.draft_items,
        num_rows="dynamic",
        column_config={
            "name": st.column_config.TextColumn("Butiran Pembayaran"),
            "quantity": st.column_config.NumberColumn("Unit", min_value=0, step=1),
            "price": st.column_config.NumberColumn("Harga (RM)", format="%.2f"),
        },
        key="draft_editor",
    )

    items = []
    for row in edited:
        try:
            if row.get("name"):
                items.append(DraftItem(
                    name=row["name"],
                    price=Decimal(str(row.get("price") or 0)),
                    quantity=int(row.get("quantity") or 0),
                ))
        except (ValidationError, ValueError, InvalidOperation) as e:
            st.error(f"Baris tidak sah: {e}")

    total = sum((item.line_amount for item in items), Decimal("0"))
    st.markdown(f"### Jumlah: {money(total)}")

    notes = st.text_area("Nota / Remarks", height=70)
    thermal = st.checkbox("Cetakan thermal (80mm)")

    result = validator.validate(kind, customer, items)
    if result.issues:
        st.caption(validator.get_user_friendly_summary(result))

    col1, col2 = st.columns(2)
    generate = col1.button("💾 Jana Dokumen")
    generate_print = col2.button("🖨️ Jana & Cetak")
    if generate or generate_print:
        try:
            controller.generate_document(
                kind,
                Parties(customer=customer, phone=phone or None, address=address or None),
                items,
                notes=notes or None,
                doc_date=doc_date.isoformat(),
                auto_print=generate_print,
                print_mode=PrintMode.THERMAL if thermal else PrintMode.STANDARD,
            )
        except DocumentValidationError as e:
            st.error(e.message)
        except StorageError as e:
            st.error(f"Dokumen tidak disimpan: {e}")
        else:
            st.session_state.draft_items = []
            st.rerun()


if __name__ == "__main__":
    main()
