"""
Transfer Boundaries

CSV import/export per collection, full-state JSON backup/restore and
PJS record share links. Every parser either returns fully validated
models or raises a TransferError subclass.
"""

from lawdesk.transfer.backup import backup_filename, export_backup, parse_backup
from lawdesk.transfer.csv_io import (
    CLIENT_HEADERS,
    PJS_HEADERS,
    SERVICE_HEADERS,
    export_clients_csv,
    export_filename,
    export_pjs_csv,
    export_services_csv,
    parse_clients_csv,
    parse_pjs_csv,
    parse_services_csv,
)
from lawdesk.transfer.errors import (
    BackupFormatError,
    ShareTokenError,
    TransferError,
    TransferFormatError,
)
from lawdesk.transfer.share import (
    decode_share_token,
    encode_share_token,
    extract_token_from_fragment,
    share_text,
    share_url,
)

__all__ = [
    # Backup
    "backup_filename",
    "export_backup",
    "parse_backup",
    # CSV
    "CLIENT_HEADERS",
    "PJS_HEADERS",
    "SERVICE_HEADERS",
    "export_clients_csv",
    "export_filename",
    "export_pjs_csv",
    "export_services_csv",
    "parse_clients_csv",
    "parse_pjs_csv",
    "parse_services_csv",
    # Errors
    "BackupFormatError",
    "ShareTokenError",
    "TransferError",
    "TransferFormatError",
    # Sharing
    "decode_share_token",
    "encode_share_token",
    "extract_token_from_fragment",
    "share_text",
    "share_url",
]
