"""
Serverless Reverse Proxy Handler
Routes /proxy/, /httpproxy/, /proxyport/, /httpproxyport/, /webproxy/ and
/httpwebproxy/ paths to the target encoded in the path
"""

import logging
import os
import sys
from collections import namedtuple
from datetime import datetime
from urllib.parse import quote, urlsplit

from flask import Flask, request, jsonify, Response
from werkzeug.exceptions import HTTPException

from proxy_errors import ProxyServiceError, NotFound, InternalError, error_envelope, utc_timestamp
from header_policy import DEFAULT_USER_AGENT, HeaderPolicy
from home_page import render_home_page
from html_rewriter import RewriteContext
from proxy_executor import InboundRequest, ProxyExecutor
from target_resolver import ProxyMode, resolve

app = Flask(__name__)
# keep '//' in target paths instead of redirecting to the merged path
app.url_map.merge_slashes = False

# Configuration
LOG_DIR = os.environ.get('LOG_DIR', '/tmp/proxyLogs')
REQUEST_TIMEOUT = int(os.environ.get('REQUEST_TIMEOUT', '30'))
FALLBACK_USER_AGENT = os.environ.get('FALLBACK_USER_AGENT', DEFAULT_USER_AGENT)

# --- Logging Setup ---
logger = logging.getLogger('proxy')


def _setup_logging():
    formatter = logging.Formatter('[%(asctime)s] %(message)s', datefmt='%Y-%m-%d %H:%M:%S')
    root = logging.getLogger()
    if root.handlers:
        return
    root.setLevel(logging.INFO)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    try:
        os.makedirs(LOG_DIR, exist_ok=True)
        log_file = os.path.join(LOG_DIR, f"proxy_{datetime.now().strftime('%Y-%m-%d')}.log")
        file_handler = logging.FileHandler(log_file)
    except OSError as e:
        root.warning(f"File logging disabled ({LOG_DIR}): {e}")
        return
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)


_setup_logging()


def log(msg):
    """Log message to stdout and the daily log file"""
    logger.info(msg)


Route = namedtuple('Route', ['prefix', 'mode', 'scheme'])

# Longest prefixes first: a request must never fall through to a shorter route
ROUTES = sorted([
    Route('/proxy/', ProxyMode.PLAIN, 'https'),
    Route('/httpproxy/', ProxyMode.PLAIN, 'http'),
    Route('/proxyport/', ProxyMode.WITH_PORT, 'https'),
    Route('/httpproxyport/', ProxyMode.WITH_PORT, 'http'),
    Route('/webproxy/', ProxyMode.WEB, 'https'),
    Route('/httpwebproxy/', ProxyMode.WEB, 'http'),
], key=lambda route: len(route.prefix), reverse=True)

# characters kept as they are when re-escaping the inbound path or query
PATH_SAFE_CHARS = "/:@!$&'()*+,;=~"
QUERY_SAFE_CHARS = "&=+%/?:@!$'()*,;~"

PROXY_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"]

executor = ProxyExecutor(HeaderPolicy(FALLBACK_USER_AGENT), timeout=REQUEST_TIMEOUT)


def match_route(path):
    """Return (route, path after prefix) for the first matching route, or (None, None)"""
    for route in ROUTES:
        if path.startswith(route.prefix):
            return route, path[len(route.prefix):]
    return None, None


def raw_request_path():
    """
    Inbound path as the client sent it, percent-escapes intact.

    Werkzeug decodes PATH_INFO, which would turn %3F or %23 back into URL
    syntax. Servers that expose the request line (RAW_URI / REQUEST_URI) are
    read directly; otherwise the decoded path is escaped again.
    """
    raw_uri = request.environ.get('RAW_URI') or request.environ.get('REQUEST_URI')
    if raw_uri:
        if '://' in raw_uri.split('?', 1)[0]:
            # absolute-form request target
            raw_uri = urlsplit(raw_uri).path
        raw_path = raw_uri.split('?', 1)[0]
        # WSGI strings carry the raw bytes as latin-1
        return quote(raw_path.encode('latin-1'), safe=PATH_SAFE_CHARS + '%')
    return quote(request.path, safe=PATH_SAFE_CHARS)


def raw_query_string():
    """Inbound query string with non-ASCII bytes percent-encoded, existing escapes kept"""
    return quote(request.query_string, safe=QUERY_SAFE_CHARS)


def json_response(data, status=200):
    response = jsonify(data)
    response.status_code = status
    response.headers['Content-Type'] = 'application/json;charset=UTF-8'
    response.headers['Access-Control-Allow-Origin'] = '*'
    return response


def to_flask_response(proxied):
    status = f"{proxied.status} {proxied.reason}" if proxied.reason else proxied.status
    response = Response(proxied.body, status=status, headers=proxied.headers)
    if 'content-type' not in proxied.headers:
        # Flask adds a default mimetype; the upstream did not send one
        del response.headers['Content-Type']
    return response


@app.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint"""
    return json_response({"status": "healthy", "timestamp": utc_timestamp()})


@app.route('/', methods=['GET'])
def home():
    response = Response(render_home_page(request.host), mimetype='text/html')
    response.headers['Content-Type'] = 'text/html;charset=UTF-8'
    response.headers['Cache-Control'] = 'public, max-age=300'
    return response


@app.route('/<path:path>', methods=PROXY_METHODS)
def dispatch(path):
    """Resolve the route prefix and forward the request to the target"""
    route, rest = match_route(raw_request_path())
    if route is None:
        raise NotFound('Invalid route. Supported routes: ' + ', '.join(
            f"{r.prefix}*" for r in sorted(ROUTES, key=lambda r: r.prefix)))

    target = resolve(rest, raw_query_string(), route.mode, route.scheme)

    inbound = InboundRequest(
        method=request.method,
        headers=request.headers,
        body=request.get_data(),
        proxy_origin=request.host_url.rstrip('/'),
    )

    rewrite_context = None
    if route.mode is ProxyMode.WEB:
        rewrite_context = RewriteContext(
            target_origin=target.origin,
            proxy_origin=inbound.proxy_origin,
            proxy_prefix=route.prefix,
        )

    log(f"📥 {request.method} {route.prefix} -> {target.url}")
    return to_flask_response(executor.execute(inbound, target, rewrite_context))


@app.errorhandler(ProxyServiceError)
def proxy_service_error(e):
    if e.status_code >= 500:
        log(f"❌ {e.message}: {e.details}")
    return json_response(e.to_envelope(), e.status_code)


@app.errorhandler(404)
def not_found(e):
    return json_response(error_envelope("Not Found", 404, e.description), 404)


@app.errorhandler(405)
def method_not_allowed(e):
    return json_response(error_envelope("Method Not Allowed", 405, e.description), 405)


@app.errorhandler(500)
def internal_error(e):
    original = getattr(e, 'original_exception', None) or e
    details = str(original) if not isinstance(original, HTTPException) else original.description
    logger.exception(f"❌ Unhandled error: {details}", exc_info=original)
    return json_response(InternalError(details).to_envelope(), 500)


if __name__ == '__main__':
    # Local development
    app.run(host='0.0.0.0', port=int(os.environ.get('PORT', 8000)), debug=False)
