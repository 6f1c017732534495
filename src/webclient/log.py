# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Logging setup for applications embedding webclient.

The library only emits through module loggers (``webclient.client``,
``webclient.http.httpx_transport``, ...); nothing is configured on import.
Dispatch and decode events log at DEBUG, forced certificate trust at WARNING.
"""

from __future__ import annotations

import logging
import os

DEFAULT_LOG_LEVEL = os.getenv("WEBCLIENT_LOG_LEVEL", "WARNING").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s"


def setup_logging(level: str | None = None) -> None:
    """Route webclient records to stderr; thread names show transport vs decode pools."""
    effective_level = (level or DEFAULT_LOG_LEVEL).upper()
    logging.basicConfig(level=getattr(logging, effective_level, logging.WARNING), format=LOG_FORMAT)
    logging.getLogger("webclient").setLevel(getattr(logging, effective_level, logging.WARNING))


__all__ = ["LOG_FORMAT", "setup_logging"]
