"""
Text-level link rewriting for HTML pages browsed through the web proxy.

Only double-quoted href/src/action attribute values are touched. URLs inside
<style>/<script> blocks, CSS url(...) and protocol-relative links (//host/x)
are left as they are.
"""
import re
from dataclasses import dataclass
from urllib.parse import urlsplit

ABSOLUTE_URL_RE = re.compile(r'(href|src|action)="(https?://[^"]+)"', re.IGNORECASE)
ROOT_RELATIVE_URL_RE = re.compile(r'(href|src|action)="(/[^"]*)"', re.IGNORECASE)

DEFAULT_PORTS = {'http': 80, 'https': 443}


@dataclass(frozen=True)
class RewriteContext:
    target_origin: str
    proxy_origin: str
    proxy_prefix: str


def _rehome(url, proxy_origin, proxy_prefix):
    """Return the proxied form of an absolute URL, or None if it does not parse."""
    try:
        parts = urlsplit(url)
        hostname = parts.hostname
        port = parts.port
    except ValueError:
        return None
    if not hostname:
        return None

    host = f"[{hostname}]" if ':' in hostname else hostname
    if port is not None and port != DEFAULT_PORTS.get(parts.scheme.lower()):
        host = f"{host}:{port}"

    path = parts.path or '/'
    query = f"?{parts.query}" if parts.query else ''
    fragment = f"#{parts.fragment}" if parts.fragment else ''
    return f"{proxy_origin}{proxy_prefix}{host}{path}{query}{fragment}"


def rewrite_html(html, target_origin, proxy_origin, proxy_prefix):
    """
    Re-home the links of an HTML document under the proxy.

    Absolute http(s) links keep their own host:
        href="https://a.com/x" -> href="https://p.io/webproxy/a.com/x"
    Root-relative links are pinned to the current target host:
        href="/y" -> href="https://p.io/webproxy/<target host>/y"

    Never raises; a URL that cannot be parsed is left untouched.
    """
    def absolute(match):
        attr, url = match.group(1), match.group(2)
        new_url = _rehome(url, proxy_origin, proxy_prefix)
        if new_url is None:
            return match.group(0)
        return f'{attr}="{new_url}"'

    html = ABSOLUTE_URL_RE.sub(absolute, html)

    target_host = urlsplit(target_origin).netloc

    def root_relative(match):
        attr, path = match.group(1), match.group(2)
        if path.startswith('//'):
            return match.group(0)
        return f'{attr}="{proxy_origin}{proxy_prefix}{target_host}{path}"'

    return ROOT_RELATIVE_URL_RE.sub(root_relative, html)


def rewrite_with_context(html, context):
    return rewrite_html(html, context.target_origin, context.proxy_origin, context.proxy_prefix)
