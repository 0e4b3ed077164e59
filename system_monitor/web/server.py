"""HTTP server exposing the System Monitor dashboard and JSON API."""

from __future__ import annotations

import errno
import json
import logging
import os
import threading
import time
from collections import deque
from functools import partial
from http import HTTPStatus
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Any, ClassVar, Deque, Mapping, Optional, Protocol
from urllib.parse import urlsplit

from system_monitor.core.config import APP_NAME, INTERVALS, SECURITY, SecurityConfig
from system_monitor.data import MetricsSampler
from system_monitor.reporting import MailMessage, SmtpMailer, is_valid_email, render_report

from .template_renderer import SimpleTemplateRenderer

BASE_DIR = Path(__file__).resolve().parent
STATIC_DIR = BASE_DIR / "static"
TEMPLATES_DIR = BASE_DIR / "templates"

DEFAULT_PORT = 8080
MAX_BODY_BYTES = 16 * 1024

template_renderer = SimpleTemplateRenderer(TEMPLATES_DIR)
logger = logging.getLogger(__name__)


class Mailer(Protocol):
    def send(self, message: MailMessage) -> bool: ...


class RateLimiter:
    """Sliding-window request counter keyed by client address."""

    def __init__(self, max_requests: int, window_seconds: int) -> None:
        self.max_requests = max(1, max_requests)
        self.window = max(1, window_seconds)
        self._lock = threading.Lock()
        self._request_log: dict[str, Deque[float]] = {}

    def allow(self, client_ip: str, now: float | None = None) -> bool:
        now = time.monotonic() if now is None else now
        with self._lock:
            self._prune(now)
            bucket = self._request_log.setdefault(client_ip, deque())
            if len(bucket) >= self.max_requests:
                return False
            bucket.append(now)
        return True

    def tracked_clients(self) -> int:
        with self._lock:
            return len(self._request_log)

    def _prune(self, now: float) -> None:
        for client_ip in list(self._request_log):
            bucket = self._request_log[client_ip]
            while bucket and now - bucket[0] > self.window:
                bucket.popleft()
            if not bucket:
                del self._request_log[client_ip]


class MonitorRequestHandler(SimpleHTTPRequestHandler):
    """Serves the dashboard page, static assets and the JSON API."""

    server_version: ClassVar[str] = "SystemMonitorWeb/1.0"

    def __init__(
        self,
        *args: Any,
        sampler: MetricsSampler,
        mailer: Mailer,
        rate_limiter: RateLimiter,
        security_config: SecurityConfig = SECURITY,
        **kwargs: Any,
    ) -> None:
        self._sampler = sampler
        self._mailer = mailer
        self._rate_limiter = rate_limiter
        self._security = security_config
        self._response_origin: Optional[str] = None
        super().__init__(*args, directory=str(STATIC_DIR), **kwargs)

    def do_GET(self) -> None:  # noqa: N802
        self._response_origin = None
        if self.path in {"/", "/index.html"}:
            self._send_index()
            return
        if self.path == "/api/system":
            if not self._prepare_api_request():
                return
            self._send_json(self._sampler.sample().to_dict())
            return
        super().do_GET()

    def do_POST(self) -> None:  # noqa: N802
        self._response_origin = None
        if self.path != "/api/email":
            self._send_json({"error": "not_found"}, status=HTTPStatus.NOT_FOUND)
            return
        if not self._prepare_api_request():
            return
        self._handle_email()

    def do_OPTIONS(self) -> None:  # noqa: N802
        allowed, origin = self._resolve_origin()
        if not allowed:
            return
        self._response_origin = origin
        self.send_response(HTTPStatus.NO_CONTENT)
        self._apply_cors_headers(origin)
        self.send_header("Access-Control-Allow-Methods", "GET, POST, OPTIONS")
        self.send_header("Access-Control-Allow-Headers", "Content-Type")
        self.send_header("Access-Control-Max-Age", "600")
        self.end_headers()

    def log_message(self, format: str, *args: Any) -> None:  # noqa: A003 - parity with BaseHTTPRequestHandler
        logger.debug("%s - %s", self.client_address[0], format % args)

    def _handle_email(self) -> None:
        payload = self._read_json_body()
        if payload is None:
            self._send_json({"message": "Request body must be a JSON object"}, status=HTTPStatus.BAD_REQUEST)
            return
        address = payload.get("email")
        if not address:
            self._send_json({"message": "Email is required"}, status=HTTPStatus.BAD_REQUEST)
            return
        if not isinstance(address, str) or not is_valid_email(address):
            self._send_json({"message": "A valid email address is required"}, status=HTTPStatus.BAD_REQUEST)
            return

        report = render_report(self._sampler.sample())
        delivered = self._mailer.send(MailMessage(to=address, subject=report.subject, body=report.body))
        if not delivered:
            self._send_json(
                {"success": False, "message": "Failed to send email"},
                status=HTTPStatus.INTERNAL_SERVER_ERROR,
            )
            return
        self._send_json({"success": True, "message": "Email sent successfully"})

    def _read_json_body(self) -> Optional[dict[str, Any]]:
        try:
            length = int(self.headers.get("Content-Length") or 0)
        except ValueError:
            return None
        if length <= 0 or length > MAX_BODY_BYTES:
            return None
        raw = self.rfile.read(length)
        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return None
        return payload if isinstance(payload, dict) else None

    def _send_index(self) -> None:
        try:
            html = template_renderer.render(
                "index.html",
                {"app_name": APP_NAME, "poll_interval_ms": INTERVALS.dashboard_poll_ms},
            )
            content = html.encode("utf-8")
        except (OSError, ValueError) as template_error:
            logger.error("Error al renderizar la plantilla: %s", template_error)
            content = f"<html><body><h1>{APP_NAME}</h1><p>Template error</p></body></html>".encode("utf-8")

        self.send_response(HTTPStatus.OK)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(content)))
        self.end_headers()
        self.wfile.write(content)

    def _send_json(self, payload: Any, status: HTTPStatus = HTTPStatus.OK) -> None:
        body = json.dumps(payload).encode("utf-8")
        self.send_response(status)
        self._apply_cors_headers(self._response_origin)
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Cache-Control", "no-store")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _prepare_api_request(self) -> bool:
        allowed, origin = self._resolve_origin()
        if not allowed:
            return False
        self._response_origin = origin
        return self._enforce_rate_limit()

    def _resolve_origin(self) -> tuple[bool, Optional[str]]:
        origin = self.headers.get("Origin")
        allowed = self._security.allowed_origins
        if origin:
            if self._is_same_origin(origin):
                return True, origin
            if "*" in allowed or origin in allowed:
                if "*" in allowed and not self._security.allow_credentials:
                    return True, "*"
                return True, origin
            self._respond_forbidden("Origin no autorizado")
            return False, None
        if "*" in allowed and not self._security.allow_credentials:
            return True, "*"
        return True, None

    def _is_same_origin(self, origin: str) -> bool:
        # Pages served from here post back with the server's own Origin.
        host = self.headers.get("Host")
        if not host:
            return False
        parts = urlsplit(origin)
        return parts.scheme in {"http", "https"} and parts.netloc.lower() == host.lower()

    def _apply_cors_headers(self, origin: Optional[str]) -> None:
        allowed = self._security.allowed_origins
        header_value: Optional[str] = origin
        if origin is None and "*" in allowed and not self._security.allow_credentials:
            header_value = "*"
        if header_value:
            self.send_header("Access-Control-Allow-Origin", header_value)
        if self._security.allow_credentials and header_value and header_value != "*":
            self.send_header("Access-Control-Allow-Credentials", "true")
        self.send_header("Vary", "Origin")

    def _enforce_rate_limit(self) -> bool:
        if not self._security.enable_rate_limit:
            return True
        if not self._rate_limiter.allow(self.client_address[0]):
            self._too_many_requests()
            return False
        return True

    def _too_many_requests(self) -> None:
        retry_after = str(self._security.rate_limit_window_seconds)
        body = json.dumps({"error": "rate_limit", "retry_after": retry_after}).encode("utf-8")
        logger.warning("Rate limit excedido para %s", self.client_address[0])
        self.send_response(HTTPStatus.TOO_MANY_REQUESTS)
        self._apply_cors_headers(self._response_origin)
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Retry-After", retry_after)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _respond_forbidden(self, message: str) -> None:
        logger.warning("Solicitud bloqueada por CORS desde %s: %s", self.client_address[0], message)
        body = json.dumps({"error": "forbidden", "message": message}).encode("utf-8")
        self.send_response(HTTPStatus.FORBIDDEN)
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)


class MonitorServer:
    """Wraps the HTTP server together with its sampler and mailer."""

    def __init__(
        self,
        host: str = "127.0.0.1",
        port: int = 8080,
        *,
        sampler: MetricsSampler | None = None,
        mailer: Mailer | None = None,
        security_config: SecurityConfig = SECURITY,
    ) -> None:
        self.sampler = sampler or MetricsSampler()
        self.mailer = mailer or SmtpMailer()
        handler = partial(
            MonitorRequestHandler,
            sampler=self.sampler,
            mailer=self.mailer,
            rate_limiter=RateLimiter(
                security_config.rate_limit_requests,
                security_config.rate_limit_window_seconds,
            ),
            security_config=security_config,
        )

        max_attempts = 1 if port == 0 else 10
        for attempt in range(max_attempts):
            try:
                self._httpd = ThreadingHTTPServer((host, port + attempt), handler)
                break
            except OSError as exc:
                if exc.errno == errno.EADDRINUSE and attempt < max_attempts - 1:
                    continue
                raise

    def serve_forever(self) -> None:
        try:
            self._httpd.serve_forever()
        finally:
            self._httpd.server_close()

    def stop(self) -> None:
        self._httpd.shutdown()

    def server_address(self) -> str:
        host, port = self._httpd.server_address[:2]
        return f"http://{host}:{port}"


def create_app(
    host: str = "127.0.0.1",
    port: int = DEFAULT_PORT,
    *,
    sampler: MetricsSampler | None = None,
    mailer: Mailer | None = None,
    security_config: SecurityConfig = SECURITY,
) -> MonitorServer:
    """Factory helper used by the CLI entry point and tests."""

    return MonitorServer(host=host, port=port, sampler=sampler, mailer=mailer, security_config=security_config)


def port_from_env(environ: Mapping[str, str] | None = None, default: int = DEFAULT_PORT) -> int:
    env = os.environ if environ is None else environ
    port_text = env.get("MONITOR_PORT", "")
    try:
        port = int(port_text) if port_text else default
    except ValueError:
        logger.warning("MONITOR_PORT invalido (%r), usando %s", port_text, default)
        return default
    if not 0 <= port <= 65535:
        logger.warning("MONITOR_PORT fuera de rango (%s), usando %s", port, default)
        return default
    return port


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    host = os.environ.get("MONITOR_HOST", "127.0.0.1")
    port = port_from_env()
    server = create_app(host=host, port=port)
    address = server.server_address()
    print(f"🚀 {APP_NAME} Web UI")
    print(f"🌐 Servidor disponible en {address}")
    print("⏹️  Presiona Ctrl+C para detener")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("\n🛑 Deteniendo servidor...")


if __name__ == "__main__":
    main()
