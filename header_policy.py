"""
Header filtering in both directions of the proxy.

Only allow-listed headers cross the proxy. Nothing identifying the client or
the proxy itself (X-Forwarded-For, X-Real-IP, ...) is ever added upstream.
"""
from werkzeug.datastructures import Headers

DEFAULT_USER_AGENT = (
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
)

REQUEST_HEADER_ALLOWLIST = frozenset([
    'accept', 'accept-encoding', 'accept-language', 'authorization',
    'content-type', 'user-agent', 'cache-control', 'pragma', 'content-length',
    'origin', 'referer', 'cookie', 'x-requested-with',
])

# 'location' is deliberately absent: upstream redirects must not leak the raw target URL
RESPONSE_HEADER_ALLOWLIST = frozenset([
    'content-type', 'content-encoding', 'content-length', 'cache-control',
    'etag', 'last-modified',
])

WEB_RESPONSE_HEADER_ALLOWLIST = RESPONSE_HEADER_ALLOWLIST | {'set-cookie'}

CORS_HEADERS = (
    ('access-control-allow-origin', '*'),
    ('access-control-allow-methods', 'GET, POST, PUT, DELETE, OPTIONS, HEAD, PATCH'),
    ('access-control-allow-headers', '*'),
    ('access-control-max-age', '86400'),
)


def _items(source):
    if hasattr(source, 'items'):
        return source.items()
    return source


class HeaderPolicy:
    """Builds the outbound request headers and the filtered response headers"""

    def __init__(self, fallback_user_agent=DEFAULT_USER_AGENT):
        self.fallback_user_agent = fallback_user_agent

    def build_request_headers(self, original, target):
        """
        Copy allow-listed client headers and pin Host to the target.

        Args:
            original: mapping or iterable of (name, value) pairs from the client
            target: ResolvedTarget the request is sent to
        """
        headers = Headers()
        for name, value in _items(original):
            key = name.lower()
            if key in REQUEST_HEADER_ALLOWLIST:
                headers.set(key, value)

        headers.set('host', target.netloc)

        if 'user-agent' not in headers:
            headers.set('user-agent', self.fallback_user_agent)

        return headers

    def build_response_headers(self, upstream, is_web_mode=False):
        """
        Filter upstream response headers.

        Set-Cookie survives only in web mode, every occurrence of it.
        The plain and with-port modes get permissive CORS headers instead.
        """
        allowlist = WEB_RESPONSE_HEADER_ALLOWLIST if is_web_mode else RESPONSE_HEADER_ALLOWLIST

        headers = Headers()
        for name, value in _items(upstream):
            key = name.lower()
            if key not in allowlist:
                continue
            if key == 'set-cookie':
                headers.add(key, value)
            else:
                headers.set(key, value)

        if not is_web_mode:
            for key, value in CORS_HEADERS:
                headers.set(key, value)

        return headers
