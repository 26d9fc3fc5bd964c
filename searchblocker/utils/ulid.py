"""ULID generation utility for SearchBlocker.

Request IDs are ULIDs: 26 characters, Crockford Base32, lexicographically
sortable by creation time. They are returned in the
``X-SearchBlocker-Request-ID`` header and bound into every log line emitted
while the request is handled.

Uses the `python-ulid` library (see pyproject.toml).
"""

from __future__ import annotations

from ulid import ULID


def generate_ulid() -> str:
    """Generate a new ULID as a 26-character uppercase string.

    Example::

        request_id = generate_ulid()
        # "01KJ0JRVHYA7KX32VPN5ZSCTMV"
        assert len(request_id) == 26
    """
    return str(ULID())
