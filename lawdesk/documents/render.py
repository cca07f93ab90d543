"""
Document Rendering

Renders a Document to a standalone HTML page for printing or saving as
PDF from the browser. Two layouts:
- standard: A5 letterhead with watermark, ref/date block and notes
- thermal: 80mm roll, monospace, no watermark

Rendering is pure: the same document, firm, logo and mode always give
the same HTML. All user text is HTML-escaped.
"""

import html
from decimal import Decimal
from typing import Optional

from lawdesk.config.settings import FirmSettings
from lawdesk.models.document import DocumentBase, PrintMode


MIN_TABLE_ROWS = 3

STANDARD_CSS = """
@page { size: A5; margin: 10mm; }
body { font-family: Georgia, 'Times New Roman', serif; color: #111; background: #fcfcf9; margin: 0; }
.doc { position: relative; padding: 24px; overflow: hidden; }
.watermark { position: absolute; top: 40%; left: 0; right: 0; text-align: center;
  font-size: 96px; font-weight: 900; color: rgba(0,0,0,0.04); transform: rotate(-30deg); }
.letterhead { display: flex; gap: 16px; align-items: center; border-bottom: 3px solid #111; padding-bottom: 12px; }
.letterhead img { height: 72px; }
.letterhead h1 { margin: 0; font-size: 22px; letter-spacing: 1px; }
.letterhead .tagline { margin: 2px 0; font-style: italic; }
.letterhead .contact { font-size: 10px; color: #444; }
.doctype { text-align: right; margin: 12px 0; }
.doctype small { display: block; font-size: 9px; letter-spacing: 3px; color: #888; }
.doctype strong { font-size: 20px; letter-spacing: 2px; }
.info { display: flex; justify-content: space-between; margin: 16px 0; font-size: 12px; }
.info .label { font-size: 9px; text-transform: uppercase; color: #888; margin: 0; }
.info .customer { font-size: 16px; font-weight: bold; margin: 2px 0; }
table { width: 100%; border-collapse: collapse; font-size: 12px; }
th { text-align: left; border-bottom: 2px solid #111; padding: 6px; font-size: 10px; text-transform: uppercase; }
td { padding: 8px 6px; border-bottom: 1px solid #ddd; }
td.amount, th.amount { text-align: right; font-variant-numeric: tabular-nums; }
td.credit { color: #15803d; }
.notes { margin-top: 16px; font-size: 11px; border-left: 3px solid #d4af37; padding-left: 8px; }
.total { margin-top: 16px; text-align: right; }
.total .label { font-size: 10px; letter-spacing: 2px; }
.total .value { font-size: 24px; font-weight: 900; }
.footer { margin-top: 24px; font-size: 10px; text-align: center; color: #555; }
"""

THERMAL_CSS = """
@page { size: 80mm auto; margin: 2mm; }
body { font-family: 'Courier New', monospace; font-size: 12px; color: #000; margin: 0; }
.doc { width: 76mm; margin: 0 auto; }
.center { text-align: center; }
.center img { height: 48px; filter: grayscale(100%); }
h1 { font-size: 15px; margin: 4px 0; text-transform: uppercase; }
h2 { font-size: 13px; text-decoration: underline; border-top: 1px dashed #000; padding-top: 4px; }
p { margin: 2px 0; }
table { width: 100%; border-top: 1px dashed #000; border-bottom: 1px dashed #000; }
th { text-align: left; border-bottom: 1px solid #000; }
td.amount, th.amount { text-align: right; }
.total { text-align: right; margin: 8px 0; font-size: 15px; font-weight: bold; }
.footer { text-align: center; border-top: 1px dashed #000; padding-top: 6px; font-size: 10px; }
"""


def format_amount(value: Decimal) -> str:
    """Thousands-separated, always two decimals: `1,234.50`, `-40.00`."""
    return f"{value:,.2f}"


def _esc(value: Optional[str]) -> str:
    return html.escape(value or "")


def _footer_note(document: DocumentBase, firm: FirmSettings) -> str:
    return document.labels.footer_note.format(firm=firm.name)


def _logo_img(logo: Optional[str]) -> str:
    if not logo:
        return ""
    return f'<img src="{html.escape(logo, quote=True)}" alt="Logo">'


def _standard_rows(document: DocumentBase) -> str:
    rows = []
    for line in document.lines:
        css = "amount credit" if line.is_credit else "amount"
        rows.append(
            f'<tr><td>{_esc(line.label)}</td>'
            f'<td class="{css}">{format_amount(line.amount)}</td></tr>'
        )
    for _ in range(max(0, MIN_TABLE_ROWS - len(document.lines))):
        rows.append("<tr><td>&nbsp;</td><td></td></tr>")
    return "\n".join(rows)


def _render_standard(
    document: DocumentBase,
    firm: FirmSettings,
    logo: Optional[str],
    currency: str,
) -> str:
    labels = document.labels
    contact_lines = []
    phone = getattr(document, "customer_phone", None)
    address = getattr(document, "customer_address", None)
    if phone:
        contact_lines.append(f"<p>T: {_esc(phone)}</p>")
    if address:
        contact_lines.append(f"<p>{_esc(address)}</p>")

    contact = "".join(contact_lines)
    notes = ""
    if document.notes:
        notes = (
            '<div class="notes"><p class="label">Nota / Remarks</p>'
            f"<p>{_esc(document.notes)}</p></div>"
        )

    return f"""<div class="doc">
<div class="watermark">{_esc(labels.watermark)}</div>
<div class="letterhead">
{_logo_img(logo)}
<div>
<h1>{_esc(firm.name)}</h1>
<p class="tagline">{_esc(firm.tagline)}</p>
<p class="contact">{_esc(firm.address)}<br>{_esc(firm.contact)}</p>
</div>
</div>
<div class="doctype"><small>DOKUMEN RASMI</small><strong>{_esc(labels.type_label)}</strong></div>
<div class="info">
<div>
<p class="label">{_esc(labels.customer_label)}</p>
<p class="customer">{_esc(document.customer)}</p>
{contact}
</div>
<div>
<p class="label">No. Rujukan / Ref No.</p>
<p><strong>{_esc(document.doc_no)}</strong></p>
<p class="label">Tarikh Dokumen / Date</p>
<p><strong>{_esc(document.date)}</strong></p>
</div>
</div>
<table>
<thead><tr><th>Butiran Perkhidmatan &amp; Transaksi / Description</th><th class="amount">Amaun ({_esc(currency)})</th></tr></thead>
<tbody>
{_standard_rows(document)}
</tbody>
</table>
{notes}
<div class="total">
<div class="label">{_esc(labels.total_label)}</div>
<div class="value">{_esc(currency)} {format_amount(document.total)}</div>
</div>
<div class="footer">{_esc(_footer_note(document, firm))}</div>
</div>"""


def _render_thermal(
    document: DocumentBase,
    firm: FirmSettings,
    logo: Optional[str],
    currency: str,
) -> str:
    rows = "\n".join(
        f'<tr><td>{_esc(line.label.upper())}</td>'
        f'<td class="amount">{format_amount(line.amount)}</td></tr>'
        for line in document.lines
    )
    return f"""<div class="doc">
<div class="center">
{_logo_img(logo)}
<h1>{_esc(firm.name)}</h1>
<p>{_esc(firm.tagline.upper())}</p>
<h2>{_esc(document.labels.type_label)}</h2>
</div>
<p><b>TARIKH:</b> {_esc(document.date)}</p>
<p><b>NO REF:</b> {_esc(document.doc_no)}</p>
<p><b>KLIEN:</b> {_esc(document.customer)}</p>
<table>
<thead><tr><th>BUTIRAN</th><th class="amount">{_esc(currency)}</th></tr></thead>
<tbody>
{rows}
</tbody>
</table>
<div class="total">{_esc(currency)} {format_amount(document.total)}</div>
<div class="footer"><p>*** DOKUMEN SISTEM DIGITAL ***</p></div>
</div>"""


def render_document_html(
    document: DocumentBase,
    firm: FirmSettings,
    logo: Optional[str] = None,
    print_mode: PrintMode = PrintMode.STANDARD,
    currency: str = "RM",
) -> str:
    """
    Render a full HTML page for a document.

    Args:
        document: Any document variant
        firm: Letterhead details
        logo: Firm logo data URL, omitted when None
        print_mode: Standard A5 or 80mm thermal layout
        currency: Label printed next to amounts

    Returns:
        A complete `<!doctype html>` page
    """
    if print_mode is PrintMode.THERMAL:
        css = THERMAL_CSS
        body = _render_thermal(document, firm, logo, currency)
    else:
        css = STANDARD_CSS
        body = _render_standard(document, firm, logo, currency)

    return (
        '<!doctype html><html><head><meta charset="utf-8">'
        f"<title>{_esc(document.doc_no)}</title>"
        f"<style>{css}</style></head>"
        f"<body>{body}</body></html>"
    )


def print_script(delay_ms: int) -> str:
    """Script that opens the browser print dialog after `delay_ms`."""
    return f"<script>setTimeout(function () {{ window.print(); }}, {int(delay_ms)});</script>"
