"""Entry point for the Cobbler CLI application.

Performs system trust store injection (via truststore) before loading the main CLI.
Environment controls:
    CBLCLI_DISABLE_OS_TRUST=1  -> skip injection
    CBLCLI_FORCE_OS_TRUST=1    -> raise if injection fails
    CBLCLI_DEBUG_OS_TRUST=1    -> show traceback on injection failure
"""

from __future__ import annotations

from cblcli.ssl_trust import inject_os_trust  # noqa: E402,I100,I202

# Inject before importing the CLI so requests sees the patched SSL configuration.
inject_os_trust()

from cblcli.main import cli  # noqa: E402,I100,I202

if __name__ == "__main__":
    cli()
