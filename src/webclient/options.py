# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Client option flags."""

from __future__ import annotations

from enum import Flag


class ClientOptions(Flag):
    """
    Independent boolean switches for a WebClient.

    Members compose with ``|`` and are tested with ``in``. The empty set is the
    default: no self-signed certificate acceptance.
    """

    NONE = 0
    ALLOWS_SELF_SIGNED_CERTS = 1 << 0


__all__ = ["ClientOptions"]
