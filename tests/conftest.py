from unittest.mock import MagicMock

import pytest
from requests.structures import CaseInsensitiveDict
from werkzeug.datastructures import Headers


def make_upstream(status=200, reason='OK', headers=None, body=b'', encoding=None):
    """Fake streamed `requests` response, shaped like what requests.request(stream=True) returns"""
    raw_headers = Headers(headers or [])
    upstream = MagicMock()
    upstream.status_code = status
    upstream.reason = reason
    upstream.headers = CaseInsensitiveDict(list(raw_headers.items()))
    upstream.raw.headers = raw_headers
    upstream.raw.stream.side_effect = lambda *args, **kwargs: iter([body] if body else [])
    upstream.content = body
    upstream.encoding = encoding
    return upstream


@pytest.fixture
def upstream_factory():
    return make_upstream
