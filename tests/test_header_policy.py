"""
Tests for request/response header filtering
"""

import pytest
from werkzeug.datastructures import Headers

from header_policy import DEFAULT_USER_AGENT, HeaderPolicy
from target_resolver import ProxyMode, resolve


@pytest.fixture
def policy():
    return HeaderPolicy()


@pytest.fixture
def target():
    return resolve('api.example.com/v1', '', ProxyMode.PLAIN)


def test_request_headers_follow_allowlist(policy, target):
    original = Headers([
        ('Accept', 'application/json'),
        ('Authorization', 'Bearer abc'),
        ('X-Custom', '1'),
        ('X-Forwarded-For', '10.0.0.1'),
        ('Connection', 'keep-alive'),
    ])
    headers = policy.build_request_headers(original, target)

    assert headers.get('accept') == 'application/json'
    assert headers.get('authorization') == 'Bearer abc'
    assert 'X-Custom' not in headers
    assert 'X-Forwarded-For' not in headers
    assert 'Connection' not in headers


def test_request_header_names_are_lowercased(policy, target):
    headers = policy.build_request_headers({'Content-Type': 'text/plain'}, target)
    assert ('content-type', 'text/plain') in list(headers.items())


def test_host_is_always_the_target(policy, target):
    headers = policy.build_request_headers({'Host': 'proxy.example.net'}, target)
    assert headers.get('host') == 'api.example.com'


def test_host_includes_port(policy):
    target = resolve('api.example.com/8443/v1', '', ProxyMode.WITH_PORT)
    headers = policy.build_request_headers({}, target)
    assert headers.get('host') == 'api.example.com:8443'


def test_default_user_agent_is_injected(policy, target):
    headers = policy.build_request_headers({}, target)
    assert headers.get('user-agent') == DEFAULT_USER_AGENT


def test_client_user_agent_is_kept(policy, target):
    headers = policy.build_request_headers({'User-Agent': 'curl/8.0'}, target)
    assert headers.get('user-agent') == 'curl/8.0'


def test_custom_fallback_user_agent(target):
    headers = HeaderPolicy('TestAgent/1.0').build_request_headers({}, target)
    assert headers.get('user-agent') == 'TestAgent/1.0'


@pytest.mark.parametrize('is_web_mode', [True, False])
def test_location_is_never_forwarded(policy, is_web_mode):
    upstream = Headers([
        ('Location', 'http://evil.example/'),
        ('Content-Type', 'text/html'),
    ])
    headers = policy.build_response_headers(upstream, is_web_mode)
    assert 'Location' not in headers
    assert headers.get('content-type') == 'text/html'


def test_set_cookie_only_in_web_mode(policy):
    upstream = Headers([
        ('Set-Cookie', 'a=1; Path=/'),
        ('Set-Cookie', 'b=2; Path=/'),
        ('Server', 'nginx'),
    ])
    web = policy.build_response_headers(upstream, is_web_mode=True)
    plain = policy.build_response_headers(upstream, is_web_mode=False)

    assert web.getlist('set-cookie') == ['a=1; Path=/', 'b=2; Path=/']
    assert 'Set-Cookie' not in plain
    assert 'Server' not in web
    assert 'Server' not in plain


def test_cors_headers_only_outside_web_mode(policy):
    plain = policy.build_response_headers({}, is_web_mode=False)
    web = policy.build_response_headers({}, is_web_mode=True)

    assert plain.get('access-control-allow-origin') == '*'
    assert plain.get('access-control-allow-methods') == 'GET, POST, PUT, DELETE, OPTIONS, HEAD, PATCH'
    assert plain.get('access-control-allow-headers') == '*'
    assert plain.get('access-control-max-age') == '86400'
    assert 'Access-Control-Allow-Origin' not in web


def test_upstream_cors_headers_are_replaced(policy):
    upstream = {'Access-Control-Allow-Origin': 'https://only.example'}
    headers = policy.build_response_headers(upstream, is_web_mode=False)
    assert headers.getlist('access-control-allow-origin') == ['*']
