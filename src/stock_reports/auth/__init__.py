"""Session tokens and OAuth provider configuration."""
from stock_reports.auth.oauth import SUPPORTED_PROVIDERS, enabled_providers
from stock_reports.auth.tokens import (SessionIdentity, create_session_token,
                                       decode_session_token)

__all__ = [
    "SUPPORTED_PROVIDERS",
    "SessionIdentity",
    "create_session_token",
    "decode_session_token",
    "enabled_providers",
]
