"""
Lawdesk - Source Package

Practice management for a single legal office: client case files with
running account ledgers, notarization (PJS) records, a service price list,
and printable receipts, invoices, quotations and account statements.

PRINCIPLES:
1. One owner of application state, one commit per accepted command
2. Fail early, fail visibly; validation never coerces silently
3. Every state change is audited
4. Storage and sync are swappable
"""

__version__ = "1.0.0"
__author__ = "Lawdesk Team"
