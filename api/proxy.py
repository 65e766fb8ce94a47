import os
import sys
from http.server import BaseHTTPRequestHandler

# api/ is deployed next to the proxy modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from serverless_handler import app  # noqa: E402

HOP_BY_HOP_HEADERS = ('content-length', 'transfer-encoding', 'connection')


class handler(BaseHTTPRequestHandler):
    """
    Vercel Serverless Function handler that wraps the Flask application.
    """

    def do_GET(self):
        self._handle_request()

    def do_POST(self):
        self._handle_request()

    def do_PUT(self):
        self._handle_request()

    def do_PATCH(self):
        self._handle_request()

    def do_DELETE(self):
        self._handle_request()

    def do_HEAD(self):
        self._handle_request()

    def do_OPTIONS(self):
        self._handle_request()

    def _handle_request(self):
        """Replay the raw request through the Flask app and write its response back."""
        content_length = int(self.headers.get('Content-Length', 0))
        body = self.rfile.read(content_length) if content_length > 0 else b''

        headers = [(key, value) for key, value in self.headers.items()
                   if key.lower() not in HOP_BY_HOP_HEADERS]

        # TLS is terminated at the platform edge; rewritten links must use the public scheme
        scheme = self.headers.get('X-Forwarded-Proto', 'https')
        host = self.headers.get('Host', 'localhost')

        with app.test_client() as client:
            response = client.open(
                self.path,
                method=self.command,
                headers=headers,
                data=body,
                base_url=f"{scheme}://{host}/"
            )

            self.send_response(response.status_code)

            for key, value in response.headers:
                if key.lower() not in HOP_BY_HOP_HEADERS:
                    self.send_header(key, value)

            response_data = response.get_data()
            if self.command == 'HEAD':
                upstream_length = response.headers.get('Content-Length')
                if upstream_length is not None:
                    self.send_header('Content-Length', upstream_length)
                self.end_headers()
                return

            self.send_header('Content-Length', str(len(response_data)))
            self.end_headers()

            self.wfile.write(response_data)
