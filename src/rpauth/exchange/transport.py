"""Transport for token endpoint requests.

The exchanger only needs "send this request, give me the response", which
is captured by the :class:`Transport` protocol. :class:`HttpxTransport` is
the default implementation, a thin wrapper over a pooled
:class:`httpx.Client` that applies the configured connect and read timeouts
and converts every httpx failure into a
:class:`~rpauth.exceptions.TransportError`.

There is no retry: authorization codes are single-use, so re-sending one
after an ambiguous failure would be rejected by the provider anyway.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

import httpx

from rpauth.exceptions import TransportError
from rpauth.models import RequestConfig

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Anything that can send an :class:`httpx.Request` synchronously."""

    def send(self, request: httpx.Request) -> httpx.Response:
        """Send *request* and return the fully read response.

        Raises:
            TransportError: On network failure or timeout.
        """
        ...


class HttpxTransport:
    """Synchronous transport backed by :class:`httpx.Client`.

    Safe to share between threads; connection pooling is handled by httpx.
    Usable as a context manager, or closed explicitly with :meth:`close`.

    Args:
        connect_timeout: Seconds allowed to establish a connection.
        read_timeout: Seconds allowed between bytes of the response (also
            used for writes and pool acquisition).
        verify: Verify the provider's TLS certificate.
        transport: Optional lower-level httpx transport, e.g.
            :class:`httpx.MockTransport` in tests.

    Example::

        with HttpxTransport(connect_timeout=0.5, read_timeout=5.0) as transport:
            response = transport.send(request)
    """

    def __init__(
        self,
        connect_timeout: float = 0.5,
        read_timeout: float = 5.0,
        verify: bool = True,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._timeout = httpx.Timeout(read_timeout, connect=connect_timeout)
        self._client = httpx.Client(
            timeout=self._timeout,
            verify=verify,
            transport=transport,
        )

    @classmethod
    def from_config(
        cls,
        config: RequestConfig,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> HttpxTransport:
        return cls(
            connect_timeout=config.connect_timeout,
            read_timeout=config.read_timeout,
            verify=config.verify_ssl,
            transport=transport,
        )

    @property
    def timeout(self) -> httpx.Timeout:
        return self._timeout

    def send(self, request: httpx.Request) -> httpx.Response:
        # Requests built outside Client.build_request carry no timeout.
        request.extensions = {**request.extensions, "timeout": self._timeout.as_dict()}
        logger.debug("%s %s", request.method, request.url)
        try:
            return self._client.send(request)
        except httpx.TimeoutException as exc:
            raise TransportError(
                f"Token request to {request.url} timed out: {exc}",
                endpoint=str(request.url),
                cause=exc,
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(
                f"Token request to {request.url} failed: {exc}",
                endpoint=str(request.url),
                cause=exc,
            ) from exc

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HttpxTransport:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
