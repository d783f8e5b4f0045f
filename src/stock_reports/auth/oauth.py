"""OAuth providers offered for sign-in.

The OAuth exchange happens in the front end; a provider is offered only
when its client credentials are configured.
"""
import os

SUPPORTED_PROVIDERS: tuple[str, ...] = ("kakao", "naver")


def enabled_providers(environ: dict[str, str] | None = None) -> list[str]:
    """Providers whose <NAME>_CLIENT_ID and <NAME>_CLIENT_SECRET are both set."""
    env = os.environ if environ is None else environ
    return [
        name
        for name in SUPPORTED_PROVIDERS
        if env.get(f"{name.upper()}_CLIENT_ID") and env.get(f"{name.upper()}_CLIENT_SECRET")
    ]
