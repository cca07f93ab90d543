"""
PJS Record Sharing

A record is shared as a link whose fragment carries the record itself:
`{base}#share-pjs={token}`, where the token is URL-safe base64 of the
record's JSON with padding removed. Opening the link shows the record
read-only; nothing is added to the receiver's data.

Decoding also accepts standard base64 with or without padding.
"""

import base64
import binascii
import json
from typing import Optional

from pydantic import ValidationError

from lawdesk.models.practice import PjsRecord
from lawdesk.transfer.errors import ShareTokenError


FRAGMENT_KEY = "share-pjs"


def encode_share_token(record: PjsRecord) -> str:
    payload = record.model_dump_json(by_alias=True)
    token = base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii")
    return token.rstrip("=")


def decode_share_token(token: str) -> PjsRecord:
    """
    Decode a share token back into a record.

    Raises:
        ShareTokenError: token is not base64, not JSON, or not a valid record
    """
    cleaned = (token or "").strip()
    if not cleaned:
        raise ShareTokenError("Share token is empty")

    cleaned = cleaned.replace("+", "-").replace("/", "_").rstrip("=")
    cleaned += "=" * (-len(cleaned) % 4)
    try:
        raw = base64.urlsafe_b64decode(cleaned.encode("ascii"))
        payload = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError) as e:
        raise ShareTokenError(f"Share token could not be decoded: {e}")

    if not isinstance(payload, dict):
        raise ShareTokenError("Share token does not hold a record")
    try:
        return PjsRecord.model_validate(payload)
    except ValidationError as e:
        raise ShareTokenError(f"Shared record is invalid: {e.errors()[0]['msg']}")


def share_url(base_url: str, record: PjsRecord) -> str:
    base = base_url.split("#", 1)[0]
    return f"{base}#{FRAGMENT_KEY}={encode_share_token(record)}"


def extract_token_from_fragment(fragment: Optional[str]) -> Optional[str]:
    """Token from `#share-pjs=...` (leading `#` optional); None for other fragments."""
    if not fragment:
        return None
    text = fragment.lstrip("#")
    prefix = f"{FRAGMENT_KEY}="
    if not text.startswith(prefix):
        return None
    return text[len(prefix):] or None


def share_text(record: PjsRecord, currency: str = "RM") -> str:
    """One-line summary sent alongside the link."""
    return f"Rekod PJS: {record.name} - {currency} {record.amount:.2f} ({record.detail})"
