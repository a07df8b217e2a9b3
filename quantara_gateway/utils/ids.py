"""Identifier generation"""

import secrets

from quantara_gateway.utils.date_utils import utc_now

_BASE36 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def generate_id(prefix: str = "QNT") -> str:
    """Readable entity id: PREFIX-<base36 epoch millis>-<4 random hex chars>"""
    millis = int(utc_now().timestamp() * 1000)
    stamp = ""
    while millis:
        millis, remainder = divmod(millis, 36)
        stamp = _BASE36[remainder] + stamp
    return f"{prefix}-{stamp or '0'}-{secrets.token_hex(2).upper()}"


def generate_nft_id() -> str:
    """Display-only token id, 40 hex characters with no cryptographic meaning"""
    return "0x" + secrets.token_hex(20)
