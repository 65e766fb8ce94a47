"""
One proxy cycle: build the outbound request, fetch the target, filter the
response headers and, in web mode, rewrite HTML bodies.
"""
import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Union

import requests
from werkzeug.datastructures import Headers

from proxy_errors import ProxyError
from header_policy import HeaderPolicy
from html_rewriter import RewriteContext, rewrite_with_context

logger = logging.getLogger(__name__)

BODYLESS_METHODS = ('GET', 'HEAD')
CHUNK_SIZE = 8192
REWRITTEN_CONTENT_TYPE = 'text/html;charset=UTF-8'
# headers requests adds on its own unless they are explicitly set to None
REQUESTS_DEFAULT_HEADERS = ('accept', 'accept-encoding', 'connection')


@dataclass
class InboundRequest:
    """Everything the core needs from the client request; lives for one request only"""
    method: str
    headers: Headers = field(default_factory=Headers)
    body: bytes = b''
    proxy_origin: str = ''


@dataclass
class ProxyResponse:
    status: int
    reason: str
    headers: Headers
    body: Union[bytes, Iterable[bytes]]


def _stream_raw(upstream):
    """Yield the undecoded upstream body and release the connection afterwards"""
    try:
        for chunk in upstream.raw.stream(CHUNK_SIZE, decode_content=False):
            if chunk:
                yield chunk
    finally:
        upstream.close()


def _outbound_headers(headers, body):
    """Plain dict for requests; nothing beyond the filtered set may reach the wire"""
    outbound = dict(headers.items())
    if body is None:
        # the client's body was dropped, its framing must go too
        outbound.pop('content-length', None)
    for name in REQUESTS_DEFAULT_HEADERS:
        if name not in outbound:
            outbound[name] = None
    return outbound


def _decode_html(upstream, content_type):
    encoding = upstream.encoding if 'charset=' in content_type.lower() else None
    try:
        return upstream.content.decode(encoding or 'utf-8', errors='replace')
    except LookupError:
        # unknown charset name
        return upstream.content.decode('utf-8', errors='replace')


class ProxyExecutor:
    """Forwards one inbound request to a resolved target"""

    def __init__(self, header_policy=None, timeout=30):
        """
        Args:
            header_policy: HeaderPolicy instance, a default one when omitted
            timeout: connect/read timeout of the upstream fetch in seconds
        """
        self.header_policy = header_policy or HeaderPolicy()
        self.timeout = timeout

    def execute(self, inbound: InboundRequest, target, rewrite_context: Optional[RewriteContext] = None) -> ProxyResponse:
        """
        Run the cycle. A rewrite_context switches on web mode: set-cookie is
        kept, no CORS headers are added and text/html bodies are rewritten.

        Raises:
            ProxyError: the target could not be reached or read
        """
        is_web_mode = rewrite_context is not None
        headers = self.header_policy.build_request_headers(inbound.headers, target)
        method = inbound.method.upper()
        body = None if method in BODYLESS_METHODS else inbound.body

        logger.info(f"Proxying {method} to: {target.url}")
        logger.debug(f"Host Header: {headers.get('host')}")

        try:
            upstream = requests.request(
                method=method,
                url=target.url,
                headers=_outbound_headers(headers, body),
                data=body,
                allow_redirects=False,
                stream=True,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Proxy error for {target.url}: {e}")
            if target.port is not None:
                raise ProxyError(f"Failed to connect to {target.host}:{target.port} - {e}") from e
            raise ProxyError(f"Failed to connect to target: {e}") from e

        logger.info(f"Response Status: {upstream.status_code}")
        logger.debug(f"Response Server: {upstream.headers.get('Server')}")
        logger.debug(f"Response Location: {upstream.headers.get('Location')}")

        response_headers = self.header_policy.build_response_headers(upstream.raw.headers, is_web_mode)
        content_type = upstream.headers.get('content-type', '')

        if is_web_mode and 'text/html' in content_type.lower():
            try:
                html = _decode_html(upstream, content_type)
            except requests.exceptions.RequestException as e:
                logger.error(f"Failed reading HTML from {target.url}: {e}")
                raise ProxyError(f"Failed to connect to target: {e}") from e
            finally:
                upstream.close()

            rewritten = rewrite_with_context(html, rewrite_context)
            response_headers.set('content-type', REWRITTEN_CONTENT_TYPE)
            # body is decoded and re-encoded, so the upstream framing no longer applies
            response_headers.remove('content-length')
            response_headers.remove('content-encoding')
            return ProxyResponse(
                status=upstream.status_code,
                reason=upstream.reason or '',
                headers=response_headers,
                body=rewritten.encode('utf-8'),
            )

        return ProxyResponse(
            status=upstream.status_code,
            reason=upstream.reason or '',
            headers=response_headers,
            body=_stream_raw(upstream),
        )
