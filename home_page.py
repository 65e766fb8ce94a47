"""
Informational landing page served at "/".
"""
from flask import render_template_string

HOME_PAGE_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Proxy</title>
    <style>
        * { margin: 0; padding: 0; box-sizing: border-box; }
        body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Arial, sans-serif; background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); min-height: 100vh; padding: 15px; }
        .container { max-width: 700px; margin: 20px auto; background: white; padding: 25px; border-radius: 16px; box-shadow: 0 20px 60px rgba(0,0,0,0.3); }
        h1 { color: #333; text-align: center; margin-bottom: 25px; font-size: 32px; font-weight: 600; }
        h2 { color: #667eea; margin: 25px 0 12px 0; font-size: 16px; }
        .input-box { background: #f8f9ff; padding: 15px; border-radius: 10px; margin-bottom: 15px; }
        .input-box input { width: 100%; padding: 12px; border: 2px solid #e0e0e0; border-radius: 8px; font-size: 14px; }
        .input-box input:focus { outline: none; border-color: #667eea; }
        .proxy-link { margin-top: 12px; padding: 12px; background: #e8f5e9; border-radius: 8px; font-family: 'Courier New', monospace; font-size: 11px; word-break: break-all; display: none; color: #2e7d32; }
        .btn-group { margin-top: 12px; display: flex; gap: 8px; }
        .btn { padding: 12px 20px; border: none; border-radius: 8px; cursor: pointer; font-size: 14px; font-weight: 500; }
        .btn-primary { background: #667eea; color: white; flex: 1; }
        .btn-success { background: #28a745; color: white; display: none; }
        .route { background: #fafafa; padding: 12px; margin: 8px 0; border-radius: 8px; border-left: 3px solid #667eea; font-size: 13px; word-break: break-all; }
        .route strong { color: #333; display: block; margin-bottom: 5px; }
        .route code { background: #e8e8e8; padding: 2px 5px; border-radius: 4px; font-size: 11px; }
        .route em { color: #666; font-size: 12px; display: block; margin-top: 5px; }
    </style>
</head>
<body>
    <div class="container">
        <h1>Proxy</h1>

        <h2>Quick access</h2>
        <div class="input-box">
            <input type="text" id="targetUrl" placeholder="Target URL, e.g. https://api.example.com/users">
            <div id="proxyLink" class="proxy-link"></div>
            <div class="btn-group">
                <button onclick="goProxy()" class="btn btn-primary">Open</button>
                <button onclick="copyProxy()" id="copyBtn" class="btn btn-success">Copy link</button>
            </div>
        </div>

        <h2>Supported routes</h2>

        <div class="route">
            <strong>HTTPS proxy:</strong> <code>/proxy/:host/:path*</code>
            <em>Example: https://{{ proxy_domain }}/proxy/httpbin.org/json</em>
        </div>

        <div class="route">
            <strong>HTTP proxy:</strong> <code>/httpproxy/:host/:path*</code>
            <em>Example: https://{{ proxy_domain }}/httpproxy/httpbin.org/json</em>
        </div>

        <div class="route">
            <strong>Proxy with port:</strong> <code>/proxyport/:host/:port/:path*</code> or <code>/httpproxyport/:host/:port/:path*</code>
            <em>Example: https://{{ proxy_domain }}/httpproxyport/portquiz.net/8080</em>
        </div>

        <div class="route" style="border-left-color: #28a745;">
            <strong>Web proxy (HTML rewriting):</strong> <code>/webproxy/:host/:path*</code> or <code>/httpwebproxy/:host/:path*</code>
            <em>Links inside HTML pages are rewritten so the whole site stays behind the proxy</em>
            <em>Example: https://{{ proxy_domain }}/webproxy/example.com</em>
        </div>

        <div class="route" style="border-left-color: #f59e0b;">
            <strong>Git mirror:</strong> clone repositories through the proxy
            <em>Example: git clone https://{{ proxy_domain }}/proxy/github.com/user/repo.git</em>
        </div>
    </div>

    <script>
    let currentProxyUrl = '';

    function updateProxyLink() {
        const url = document.getElementById('targetUrl').value.trim();
        const linkDiv = document.getElementById('proxyLink');
        const copyBtn = document.getElementById('copyBtn');
        currentProxyUrl = '';
        linkDiv.style.display = 'none';
        copyBtn.style.display = 'none';
        if (!url) return;

        try {
            const parsed = new URL(url);
            const route = parsed.protocol === 'https:' ? 'proxy' : 'httpproxy';
            const path = parsed.pathname + parsed.search + parsed.hash;
            const proxyPath = parsed.port
                ? '/' + route + 'port/' + parsed.hostname + '/' + parsed.port + path
                : '/' + route + '/' + parsed.hostname + path;
            currentProxyUrl = window.location.origin + proxyPath;
            linkDiv.textContent = currentProxyUrl;
            linkDiv.style.display = 'block';
            copyBtn.style.display = 'inline-block';
        } catch (e) {
            return;
        }
    }

    function goProxy() {
        if (currentProxyUrl) window.location.href = currentProxyUrl;
    }

    function copyProxy() {
        if (!currentProxyUrl) return;
        navigator.clipboard.writeText(currentProxyUrl).then(function () {
            const btn = document.getElementById('copyBtn');
            btn.textContent = 'Copied!';
            setTimeout(function () { btn.textContent = 'Copy link'; }, 2000);
        });
    }

    const input = document.getElementById('targetUrl');
    input.addEventListener('input', updateProxyLink);
    input.addEventListener('keypress', function (e) {
        if (e.key === 'Enter') goProxy();
    });
    </script>
</body>
</html>
"""


def render_home_page(proxy_domain):
    return render_template_string(HOME_PAGE_HTML, proxy_domain=proxy_domain)
