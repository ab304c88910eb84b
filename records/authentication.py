"""
Token authentication for the records API.

Kept apart from the views so that DRF can import it while loading
settings without pulling in any view module.  Clients may instead
send a ``Bearer`` JWT; see ``REST_FRAMEWORK`` in the settings.
"""
from __future__ import annotations

from rest_framework import authentication


class TokenAuthentication(authentication.TokenAuthentication):
    """``Authorization: Token <key>`` issued by the login endpoint."""

    keyword = 'Token'
