# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for webclient."""

import os
from dataclasses import dataclass

from .options import ClientOptions
from .version import __version__

DEFAULT_USER_AGENT = f"webclient/{__version__}"


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _positive_int_env(name: str, default: int) -> int:
    value = _int_env(name, default)
    return value if value > 0 else default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class ClientSettings:
    """Transport and client defaults."""

    timeout: float = 10.0
    user_agent: str = DEFAULT_USER_AGENT
    allow_redirects: bool = True
    max_body_bytes: int = 16 * 1024 * 1024
    transport_workers: int = 8
    decode_workers: int = 4
    allow_self_signed: bool = False

    @property
    def options(self) -> ClientOptions:
        """ClientOptions implied by these settings."""
        if self.allow_self_signed:
            return ClientOptions.ALLOWS_SELF_SIGNED_CERTS
        return ClientOptions.NONE

    @classmethod
    def from_env(cls) -> "ClientSettings":
        """Create settings from environment variables (evaluated at call time)."""
        return cls(
            timeout=_float_env("WEBCLIENT_HTTP_TIMEOUT", cls.timeout),
            user_agent=os.getenv("WEBCLIENT_USER_AGENT", cls.user_agent),
            allow_redirects=_bool_env("WEBCLIENT_HTTP_REDIRECTS", cls.allow_redirects),
            max_body_bytes=_positive_int_env("WEBCLIENT_HTTP_MAX_BODY_BYTES", cls.max_body_bytes),
            transport_workers=_positive_int_env("WEBCLIENT_TRANSPORT_WORKERS", cls.transport_workers),
            decode_workers=_positive_int_env("WEBCLIENT_DECODE_WORKERS", cls.decode_workers),
            allow_self_signed=_bool_env("WEBCLIENT_ALLOW_SELF_SIGNED", cls.allow_self_signed),
        )


def load_client_settings() -> ClientSettings:
    """Load client settings from environment with sensible defaults."""
    return ClientSettings.from_env()
