"""
Fake Neutron API server for testing without an OpenStack cloud.

    python -m neutron_exporter.mock.fake_neutron_server
    neutron-exporter --url http://localhost:9696 scrape

Serves the mock inventory under /v2.0 with Neutron-style pagination:
`limit` and `marker` query parameters, and a `<key>_links` next href
whenever a page comes back full.
"""

from __future__ import annotations

import json
from http.server import HTTPServer, BaseHTTPRequestHandler
from urllib.parse import parse_qs, urlencode, urlparse

from neutron_exporter.mock.generator import MockNeutronInventory

_inventory = MockNeutronInventory(seed=42)

_KEYS = {
    "floatingips": "floatingips",
    "networks": "networks",
    "security-groups": "security_groups",
    "subnets": "subnets",
    "ports": "ports",
    "routers": "routers",
    "agents": "agents",
    "network-ip-availabilities": "network_ip_availabilities",
}


def _marker(records: list, index: int) -> str:
    # Some agents come back without an id; fall back to the position.
    record = records[index]
    return record.get("id") or record.get("network_id") or f"idx-{index}"


def _response_key(path: str) -> str:
    if path.endswith("/l3-agents"):
        return "agents"
    return _KEYS[path]


def build_page(path: str, query: dict, base_url: str) -> dict:
    """Build one JSON page for `path` the way Neutron would."""
    records = _inventory.listing(path)
    key = _response_key(path)

    marker = query.get("marker", [None])[0]
    start = 0
    if marker:
        markers = [_marker(records, i) for i in range(len(records))]
        start = markers.index(marker) + 1 if marker in markers else len(records)

    limit = query.get("limit", [None])[0]
    if limit:
        page = records[start:start + int(limit)]
    else:
        page = records[start:]

    body = {key: page}
    if limit and len(page) == int(limit):
        params = {"limit": limit, "marker": _marker(records, start + len(page) - 1)}
        body[f"{key}_links"] = [{"rel": "next", "href": f"{base_url}/v2.0/{path}?{urlencode(params)}"}]
    return body


class _NeutronHandler(BaseHTTPRequestHandler):
    def do_GET(self):
        parsed = urlparse(self.path)
        if not parsed.path.startswith("/v2.0/"):
            self._send(404, {"NeutronError": {"message": "not found"}})
            return

        path = parsed.path[len("/v2.0/"):].strip("/")
        base_url = f"http://{self.headers.get('Host', 'localhost')}"
        try:
            body = build_page(path, parse_qs(parsed.query), base_url)
        except KeyError:
            self._send(404, {"NeutronError": {"message": f"resource {path} not found"}})
            return
        self._send(200, body)

    def _send(self, status: int, payload: dict):
        body = json.dumps(payload).encode()
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        pass  # Suppress request logging noise


def run_fake_server(host: str = "127.0.0.1", port: int = 9696):
    server = HTTPServer((host, port), _NeutronHandler)
    print(f"Fake Neutron API running at http://{host}:{port}/v2.0")
    print("Press Ctrl+C to stop.\n")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    server.server_close()
    print("\nServer stopped.")


if __name__ == "__main__":
    run_fake_server()
