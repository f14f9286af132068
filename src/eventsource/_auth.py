"""HTTP Basic authentication header helper."""
from __future__ import annotations

import base64


def basic_auth(username: str, password: str) -> str:
    """Return an ``Authorization`` header value for *username* and *password*."""
    credentials = f"{username}:{password}".encode("utf-8")
    return "Basic " + base64.b64encode(credentials).decode("ascii")
