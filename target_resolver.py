"""
Turns the part of a proxy path that follows the route prefix into the
upstream URL the request should be forwarded to.
"""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from proxy_errors import BadRequest

_PORT_RE = re.compile(r'[0-9]+')


class ProxyMode(Enum):
    PLAIN = "plain"
    WITH_PORT = "with-port"
    WEB = "web"


@dataclass(frozen=True)
class ResolvedTarget:
    scheme: str
    host: str
    port: Optional[int]
    path: str
    query: str

    @property
    def netloc(self) -> str:
        """host[:port], also the value of the outbound Host header"""
        if self.port is None:
            return self.host
        return f"{self.host}:{self.port}"

    @property
    def origin(self) -> str:
        return f"{self.scheme}://{self.netloc}"

    @property
    def url(self) -> str:
        return f"{self.origin}{self.path}{self.query}"


def parse_port(value: str) -> int:
    if not _PORT_RE.fullmatch(value):
        raise BadRequest(f"Invalid port: {value}")
    port = int(value, 10)
    if port < 1 or port > 65535:
        raise BadRequest(f"Invalid port: {value}")
    return port


def resolve(path_after_prefix: str, query_string: str, mode: ProxyMode, scheme: str = 'https') -> ResolvedTarget:
    """
    Resolve `host[/port]/path...` into a ResolvedTarget.

    Args:
        path_after_prefix: inbound path with the route prefix removed
        query_string: inbound query string, with or without the leading '?'
        mode: proxy mode selected by the route; WITH_PORT expects a port segment
        scheme: 'http' or 'https'

    Raises:
        BadRequest: host or port missing, or port outside 1-65535
    """
    segments = path_after_prefix.split('/')

    if mode is ProxyMode.WITH_PORT:
        if len(segments) < 2 or not segments[0]:
            raise BadRequest("Missing host or port parameter")
        port = parse_port(segments[1])
        rest = segments[2:]
    else:
        if not segments[0]:
            raise BadRequest("Missing host parameter")
        port = None
        rest = segments[1:]

    query = query_string or ''
    if query and not query.startswith('?'):
        query = '?' + query

    return ResolvedTarget(
        scheme=scheme,
        host=segments[0],
        port=port,
        path='/' + '/'.join(rest),
        query=query,
    )
