"""
Tests for proxy path resolution
"""

import pytest

from proxy_errors import BadRequest
from target_resolver import ProxyMode, resolve


def test_plain_mode_builds_url_with_query():
    target = resolve('example.com/a/b', 'x=1', ProxyMode.PLAIN)
    assert target.url == 'https://example.com/a/b?x=1'
    assert target.host == 'example.com'
    assert target.port is None
    assert target.path == '/a/b'


def test_bare_host_requests_root_path():
    target = resolve('example.com', '', ProxyMode.WEB, 'http')
    assert target.path == '/'
    assert target.url == 'http://example.com/'


def test_trailing_slash_is_kept():
    target = resolve('example.com/docs/', '', ProxyMode.PLAIN)
    assert target.url == 'https://example.com/docs/'


def test_query_with_leading_question_mark_is_not_doubled():
    target = resolve('example.com/search', '?q=a&b=2', ProxyMode.PLAIN)
    assert target.url == 'https://example.com/search?q=a&b=2'


def test_with_port_mode():
    target = resolve('example.com/8080/status', '', ProxyMode.WITH_PORT)
    assert target.url == 'https://example.com:8080/status'
    assert target.port == 8080
    assert target.netloc == 'example.com:8080'
    assert target.origin == 'https://example.com:8080'


def test_with_port_mode_without_path():
    target = resolve('portquiz.net/8080', '', ProxyMode.WITH_PORT, 'http')
    assert target.url == 'http://portquiz.net:8080/'


@pytest.mark.parametrize('port', ['0', '70000', 'abc', '', '-1', '80a'])
def test_invalid_ports_are_rejected(port):
    with pytest.raises(BadRequest) as exc_info:
        resolve(f'example.com/{port}/status', '', ProxyMode.WITH_PORT)
    assert exc_info.value.details == f'Invalid port: {port}'
    assert exc_info.value.status_code == 400


@pytest.mark.parametrize('mode', list(ProxyMode))
def test_missing_host_is_rejected_in_every_mode(mode):
    with pytest.raises(BadRequest):
        resolve('', '', mode)


def test_with_port_mode_requires_port_segment():
    with pytest.raises(BadRequest) as exc_info:
        resolve('example.com', '', ProxyMode.WITH_PORT)
    assert exc_info.value.details == 'Missing host or port parameter'


def test_plain_mode_missing_host_message():
    with pytest.raises(BadRequest) as exc_info:
        resolve('', '', ProxyMode.PLAIN)
    assert exc_info.value.details == 'Missing host parameter'
