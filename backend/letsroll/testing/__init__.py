"""
Shared test utilities and factories.

Re-exports all factory functions for convenient imports:
    from letsroll.testing import create_user, create_campaign, get_auth_headers
"""

from letsroll.testing.factories import (
    DEFAULT_PASSWORD,
    create_campaign,
    create_campaign_member,
    create_character,
    create_user,
    get_auth_headers,
    get_auth_token,
)

__all__ = [
    "DEFAULT_PASSWORD",
    "create_campaign",
    "create_campaign_member",
    "create_character",
    "create_user",
    "get_auth_headers",
    "get_auth_token",
]
