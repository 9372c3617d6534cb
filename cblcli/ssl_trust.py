"""System certificate store integration for HTTPS Cobbler endpoints.

Configures the `requests` stack used by the XML-RPC transport to trust the
operating system certificate store via the `truststore` library, so Cobbler
servers behind an internal CA work without editing the certifi bundle.

Environment Variables:
    CBLCLI_DISABLE_OS_TRUST=1  -> Skip injection entirely (use certifi)
    CBLCLI_FORCE_OS_TRUST=1    -> Raise on any injection failure
    CBLCLI_DEBUG_OS_TRUST=1    -> Print traceback on injection errors
"""

from __future__ import annotations

import os
import sys
import traceback

OS_TRUST_INJECTED: bool = False
OS_TRUST_REASON: str = "not-attempted"

__all__ = ["inject_os_trust", "OS_TRUST_INJECTED", "OS_TRUST_REASON"]

# Injection entry points in preferred order.
_CANDIDATES = [
    ("inject_into_requests", "requests"),
    ("inject_into_ssl", "ssl"),
]


def inject_os_trust() -> None:
    """Inject the system certificate store into requests via truststore.

    Injection is skipped when CBLCLI_DISABLE_OS_TRUST=1. A failure falls back
    to certifi with a note on stderr, unless CBLCLI_FORCE_OS_TRUST=1.
    """
    global OS_TRUST_INJECTED, OS_TRUST_REASON
    if os.environ.get("CBLCLI_DISABLE_OS_TRUST") == "1":
        OS_TRUST_INJECTED = False
        OS_TRUST_REASON = "disabled-env"
        return
    try:
        import truststore  # type: ignore

        variant = None
        for attr_name, label in _CANDIDATES:
            if hasattr(truststore, attr_name):
                getattr(truststore, attr_name)()
                variant = label
                break
        if variant is None:
            raise AttributeError(
                "truststore provides none of: " + ", ".join(name for name, _ in _CANDIDATES)
            )
        OS_TRUST_INJECTED = True
        OS_TRUST_REASON = f"injected:{variant}"
    except Exception as exc:
        if os.environ.get("CBLCLI_FORCE_OS_TRUST") == "1":
            raise
        sys.stderr.write(
            f"[cblcli] Info: system trust store injection skipped: "
            f"{exc.__class__.__name__}: {exc}.\n"
        )
        if os.environ.get("CBLCLI_DEBUG_OS_TRUST") == "1":
            traceback.print_exc()
        OS_TRUST_INJECTED = False
        OS_TRUST_REASON = f"error:{exc.__class__.__name__}"
