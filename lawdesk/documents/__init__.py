"""Document numbering, projection and rendering."""

from lawdesk.documents.builder import (
    build_document,
    build_lines,
    build_statement,
    resolve_parties,
)
from lawdesk.documents.numbering import PREFIXES, next_reference, parse_reference
from lawdesk.documents.render import format_amount, print_script, render_document_html

__all__ = [
    "PREFIXES",
    "build_document",
    "build_lines",
    "build_statement",
    "format_amount",
    "next_reference",
    "parse_reference",
    "print_script",
    "render_document_html",
    "resolve_parties",
]
