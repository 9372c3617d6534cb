"""XML-RPC query execution against a Cobbler server.

Provides QueryExecutor, which owns a single lazily-created XML-RPC proxy and
re-issues calls that fail at the transport level, up to a fixed retry budget.
HTTP goes through ``requests`` so the TLS and timeout settings of the CLI apply.
"""

import xmlrpc.client
from typing import Any, Optional
from urllib.parse import urlsplit

import click
import requests

DEFAULT_API_URL = "http://localhost/cobbler_api"
DEFAULT_MAX_RETRIES = 5
DEFAULT_TIMEOUT = 30.0

_DEFAULT_PORTS = {"http": 80, "https": 443}

# Failures that say nothing about the call itself and are worth re-issuing.
RETRYABLE_ERRORS = (requests.RequestException, xmlrpc.client.ProtocolError, OSError)


class ConfigurationError(ValueError):
    """Raised when connection settings cannot be used."""


class RequestsTransport(xmlrpc.client.Transport):
    """XML-RPC transport that posts requests with the ``requests`` library."""

    def __init__(
        self, scheme: str = "http", verify: bool = True, timeout: Optional[float] = None
    ) -> None:
        """Initialize the transport.

        Args:
            scheme: URL scheme of the endpoint (http or https)
            verify: Whether to verify TLS certificates
            timeout: Per-call timeout in seconds, or None to wait indefinitely
        """
        super().__init__()
        self.scheme = scheme
        self.verify = verify
        self.timeout = timeout

    def request(self, host, handler, request_body, verbose=False):  # type: ignore[override]
        """Send a marshalled call and return the unmarshalled response."""
        url = f"{self.scheme}://{host}{handler}"
        resp = requests.post(
            url,
            data=request_body,
            headers={"Content-Type": "text/xml"},
            verify=self.verify,
            timeout=self.timeout,
        )
        if resp.status_code != 200:
            raise xmlrpc.client.ProtocolError(
                url,
                resp.status_code,
                getattr(resp, "reason", ""),
                dict(getattr(resp, "headers", {})),
            )
        parser, unmarshaller = self.getparser()
        parser.feed(resp.content)
        parser.close()
        return unmarshaller.close()


class QueryExecutor:
    """Call remote methods on a Cobbler XML-RPC endpoint with bounded retry."""

    def __init__(
        self,
        url: str = DEFAULT_API_URL,
        max_retries: int = DEFAULT_MAX_RETRIES,
        client: Any = None,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
        verify: bool = True,
        warn_on_retry: bool = True,
    ) -> None:
        """Initialize the executor.

        Args:
            url: Cobbler API endpoint, e.g. http://cobbler.example.com/cobbler_api
            max_retries: Number of times a transport failure is retried
            client: Already connected XML-RPC proxy to use instead of creating one
            timeout: Per-call timeout in seconds
            verify: Whether to verify TLS certificates
            warn_on_retry: Whether to print a warning to stderr on each retry

        Raises:
            ConfigurationError: If the URL or retry count is invalid
        """
        self._parts = _parse_url(url)
        self.url = url.strip()
        if isinstance(max_retries, bool) or not isinstance(max_retries, int) or max_retries < 0:
            raise ConfigurationError(
                f"'{max_retries}' is not a valid retry count. Use a non-negative integer."
            )
        self.max_retries = max_retries
        self.timeout = timeout
        self.verify = verify
        self.warn_on_retry = warn_on_retry
        self.client = client
        self.attempts = 0

    @property
    def host(self) -> str:
        """Hostname of the endpoint."""
        return self._parts.hostname or ""

    @property
    def path(self) -> str:
        """Path of the endpoint."""
        return self._parts.path or "/"

    @property
    def port(self) -> int:
        """Port of the endpoint, defaulted from the scheme."""
        return self._parts.port or _DEFAULT_PORTS[self._parts.scheme]

    def connect(self) -> "QueryExecutor":
        """Create the XML-RPC proxy if it does not exist yet."""
        if self.client is None:
            transport = RequestsTransport(
                scheme=self._parts.scheme, verify=self.verify, timeout=self.timeout
            )
            self.client = xmlrpc.client.ServerProxy(
                self.url, transport=transport, allow_none=True
            )
        return self

    def invoke(self, action: str, args: Any) -> Any:
        """Call remote method ``action`` with ``args``.

        Transport failures are retried immediately until more than
        ``max_retries`` retries would be needed; the call then yields None.
        XML-RPC faults and any other errors propagate to the caller.

        Args:
            action: Remote method name, e.g. ``get_system``
            args: Single argument passed to the remote method

        Returns:
            The remote result, or None when the retry budget is exhausted
        """
        self.connect()
        method = getattr(self.client, action)
        self.attempts = 0
        while self.attempts <= self.max_retries:
            self.attempts += 1
            try:
                return method(args)
            except xmlrpc.client.Fault:
                raise
            except RETRYABLE_ERRORS as exc:
                if self.warn_on_retry:
                    remaining = self.max_retries - self.attempts + 1
                    click.echo(
                        f"✗ Warning: {action} failed ({exc.__class__.__name__}: {exc}); "
                        f"{max(remaining, 0)} retries left.",
                        err=True,
                    )
        return None


def _parse_url(url: Any):
    """Split an endpoint URL, rejecting anything that is not http(s)://host[...]."""
    if not isinstance(url, str) or not url.strip():
        raise ConfigurationError(f"'{url}' is not a valid URL.")
    try:
        parts = urlsplit(url.strip())
        # Accessing .port validates the port component.
        parts.port
    except ValueError:
        raise ConfigurationError(f"'{url}' is not a valid URL.")
    if parts.scheme not in _DEFAULT_PORTS or not parts.hostname:
        raise ConfigurationError(f"'{url}' is not a valid URL.")
    return parts
