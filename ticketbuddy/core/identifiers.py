"""Server-side identifiers for tickets and incidents."""

import secrets
import time


def generate_identifier(prefix: str) -> str:
    """
    Time-based identifier with a random suffix, e.g. ``TICKET-482913-9f2c1a``.

    The six clock digits keep ids short and roughly sortable; the suffix keeps
    ids distinct when several are minted within the same millisecond.
    """
    millis = str(int(time.time() * 1000))
    return f"{prefix}-{millis[-6:]}-{secrets.token_hex(3)}"
