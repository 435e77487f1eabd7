"""URL decomposition of a Request into HTTP sampler endpoint fields."""

import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit

from jmeter_scenario.core.scenario_model import Request

logger = logging.getLogger(__name__)

# Ports left out of the endpoint because they are the scheme default
DEFAULT_PORTS = {"http": 80, "https": 443}


@dataclass
class JMXRequest:
    """Endpoint fields consumed by the HTTP sampler node.

    Only the method is kept when the request has no URL or the URL is
    malformed; the sampler is still emitted with empty endpoint properties.

    Attributes:
        method: HTTP method of the request
        protocol: URL scheme without the trailing ":" (e.g. "https")
        hostname: Host name
        port: Explicit port as a string, "" when the URL has none or it is
            the scheme default
        pathname: URL path; for non-GET requests the query string follows,
            with every "&" written as "&amp;"
    """

    method: Optional[str] = None
    protocol: Optional[str] = None
    hostname: Optional[str] = None
    port: Optional[str] = None
    pathname: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.hostname is None

    @classmethod
    def from_request(cls, request: Optional[Request]) -> "JMXRequest":
        """Decompose a request's URL.

        Args:
            request: Request with an absolute URL and a method

        Returns:
            Populated JMXRequest; only the method is set when the URL is
            missing or cannot be parsed
        """
        if not isinstance(request, Request):
            return cls()
        if not request.url:
            return cls(method=request.method)

        try:
            parsed = urlsplit(str(request.url))
            # Accessing .port validates it (raises ValueError when not numeric)
            port = parsed.port
        except ValueError as e:
            logger.warning("Malformed URL %r in request %r: %s", request.url, request.name, e)
            return cls(method=request.method)

        if not parsed.scheme or not parsed.hostname:
            logger.warning("Malformed URL %r in request %r: not absolute", request.url, request.name)
            return cls(method=request.method)

        method = request.method or ""
        pathname = parsed.path or "/"
        # Query string is kept for non-GET requests only
        if method.upper() != "GET" and parsed.query:
            pathname += "?" + parsed.query.replace("&", "&amp;")

        return cls(
            method=request.method,
            protocol=parsed.scheme,
            hostname=parsed.hostname,
            port="" if port is None or DEFAULT_PORTS.get(parsed.scheme) == port else str(port),
            pathname=pathname,
        )
