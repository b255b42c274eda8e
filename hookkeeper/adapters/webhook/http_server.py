"""HTTP server adapter for the admin API and webhook endpoint.

Provides a simple HTTP server using Python's built-in http.server module,
running in a worker thread and handing requests to the asyncio event loop
that owns the core services.

Admin routes (/api/*) support optional API key authentication via the
Authorization header (Bearer token) or X-API-Key. The webhook endpoint and
/health are public.
"""

import asyncio
import hmac
import json
import logging
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Coroutine

from hookkeeper.adapters.webhook.receiver import WebhookReceiver
from hookkeeper.core.validator import VALIDATION_PROBE_HEADER

logger = logging.getLogger(__name__)

MAX_BODY_SIZE = 1024 * 1024
REQUEST_TIMEOUT_SECONDS = 60


def make_webhook_handler(
    webhook_receiver: WebhookReceiver,
    event_loop: asyncio.AbstractEventLoop,
    webhook_path: str,
    api_key: str | None,
    require_auth: bool,
) -> type[BaseHTTPRequestHandler]:
    """Factory to create a request handler class bound to its dependencies.

    Args:
        webhook_receiver: Receiver for admin and webhook operations
        event_loop: Event loop the core services run on
        webhook_path: Path segment of the GitHub webhook endpoint
        api_key: Optional API key for admin authentication
        require_auth: Whether admin routes require authentication

    Returns:
        A handler class configured with the provided dependencies
    """
    hook_paths = {f"/{webhook_path.strip('/')}", f"/{webhook_path.strip('/')}/"}

    class HookHTTPHandler(BaseHTTPRequestHandler):
        """HTTP request handler for admin and webhook endpoints."""

        def _check_auth(self) -> bool:
            """Check if an admin request is authenticated.

            Supports two authentication methods:
            1. Authorization: Bearer <api_key>
            2. X-API-Key: <api_key>
            """
            if not require_auth:
                return True

            if not api_key:
                return False

            auth_header = self.headers.get("Authorization", "")
            if auth_header.startswith("Bearer "):
                return hmac.compare_digest(auth_header[7:], api_key)

            api_key_header = self.headers.get("X-API-Key", "")
            if api_key_header:
                return hmac.compare_digest(api_key_header, api_key)

            return False

        def _read_body(self) -> bytes | None:
            content_length = int(self.headers.get("Content-Length", 0))
            if content_length > MAX_BODY_SIZE:
                self.send_error(413, "Request body too large")
                return None
            return self.rfile.read(content_length) if content_length > 0 else b""

        def do_POST(self) -> None:
            """Handle POST requests.

            Routes to appropriate handler based on path.
            """
            if self.path in hook_paths:
                self._handle_hook_delivery()
                return

            if self.path == "/health":
                self._send_response({"status": "healthy"})
                return

            if not self.path.startswith("/api/"):
                self.send_error(404, "Not found")
                return

            if not self._check_auth():
                self.send_error(401, "Unauthorized: invalid or missing API key")
                return

            body = self._read_body()
            if body is None:
                return

            try:
                data = json.loads(body) if body else {}
            except json.JSONDecodeError:
                self.send_error(400, "Invalid JSON body")
                return
            if not isinstance(data, dict):
                self.send_error(400, "JSON body must be an object")
                return

            if self.path == "/api/hook-url/check":
                value = data.get("value")
                if not value or not isinstance(value, str):
                    self.send_error(400, "Missing or invalid value")
                    return
                self._run_async(webhook_receiver.handle_check_hook_url(value))
            elif self.path == "/api/configure":
                self._run_async(webhook_receiver.handle_configure(data))
            elif self.path == "/api/re-register":
                self._run_async(webhook_receiver.handle_re_register())
            else:
                self.send_error(404, "Not found")

        def do_GET(self) -> None:
            """Handle GET requests."""
            if self.path == "/health":
                self._send_response({"status": "healthy"})
            elif self.path == "/api/configuration":
                if not self._check_auth():
                    self.send_error(401, "Unauthorized: invalid or missing API key")
                    return
                self._run_async(webhook_receiver.handle_get_configuration())
            else:
                self.send_error(404, "Not found")

        def _handle_hook_delivery(self) -> None:
            body = self._read_body()
            if body is None:
                return
            if self.headers.get(VALIDATION_PROBE_HEADER, "").lower() == "true":
                self._send_response(
                    {"status": "ok"},
                    extra_headers=webhook_receiver.handle_validation_probe(),
                )
                return
            result = webhook_receiver.handle_webhook_event(
                self.headers.get("X-GitHub-Event"), body
            )
            self._send_response(result)

        def _run_async(self, coro: Coroutine[Any, Any, dict[str, Any]]) -> None:
            """Run a receiver coroutine on the event loop and send its result."""
            future = asyncio.run_coroutine_threadsafe(coro, event_loop)
            try:
                result = future.result(timeout=REQUEST_TIMEOUT_SECONDS)
            except ValueError as e:
                self.send_error(400, str(e))
                return
            except Exception as e:
                # Log full exception server-side for debugging
                logger.error(f"Error handling request {self.path}: {e}", exc_info=True)
                self.send_error(500, "Internal server error")
                return
            self._send_response(result)

        def _send_response(
            self,
            data: dict[str, Any],
            extra_headers: dict[str, str] | None = None,
        ) -> None:
            """Send JSON response."""
            self.send_response(200)
            self.send_header("Content-Type", "application/json")
            for name, value in (extra_headers or {}).items():
                self.send_header(name, value)
            self.end_headers()
            self.wfile.write(json.dumps(data).encode())

        def log_message(self, format: str, *args: Any) -> None:
            """Log HTTP request."""
            logger.debug(f"HTTP {self.client_address[0]}: {format % args}")

    return HookHTTPHandler


class WebhookHTTPServer:
    """HTTP server adapter for hook management.

    Serves the admin API and the GitHub webhook endpoint.
    """

    def __init__(
        self,
        webhook_receiver: WebhookReceiver,
        host: str = "0.0.0.0",
        port: int = 8080,
        webhook_path: str = "github-webhook",
        api_key: str | None = None,
        require_auth: bool = False,
    ):
        """Initialize the HTTP server.

        Args:
            webhook_receiver: WebhookReceiver instance to handle requests.
            host: Host to listen on (default 0.0.0.0).
            port: Port to listen on (default 8080).
            webhook_path: Path segment of the GitHub webhook endpoint.
            api_key: Optional API key for admin authentication.
            require_auth: Whether admin routes require authentication.
                         If True, api_key must be provided.

        Raises:
            ValueError: If require_auth is True and no api_key is provided.
        """
        if require_auth and not api_key:
            raise ValueError(
                "Admin authentication is enabled (require_auth=True) "
                "but no API key provided"
            )
        self.webhook_receiver = webhook_receiver
        self.host = host
        self.port = port
        self.webhook_path = webhook_path
        self.api_key = api_key
        self.require_auth = require_auth
        self.server: ThreadingHTTPServer | None = None
        self._server_task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        """Start the HTTP server."""
        if self.require_auth:
            logger.info(
                f"Starting HTTP server on {self.host}:{self.port} "
                "(with API key authentication)"
            )
        else:
            logger.info(f"Starting HTTP server on {self.host}:{self.port}")

        handler_class = make_webhook_handler(
            webhook_receiver=self.webhook_receiver,
            event_loop=asyncio.get_running_loop(),
            webhook_path=self.webhook_path,
            api_key=self.api_key,
            require_auth=self.require_auth,
        )

        self.server = ThreadingHTTPServer((self.host, self.port), handler_class)
        # port 0 binds an ephemeral port
        self.port = self.server.server_address[1]

        self._server_task = asyncio.create_task(self._run_server())
        logger.info(
            f"HTTP server started, webhook endpoint at /{self.webhook_path.strip('/')}/"
        )

    async def _run_server(self) -> None:
        """Run the HTTP server loop in a thread pool."""
        if not self.server:
            return

        try:
            await asyncio.to_thread(self.server.serve_forever)
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error(f"HTTP server error: {e}", exc_info=True)

    async def stop(self) -> None:
        """Stop the HTTP server."""
        if self.server:
            await asyncio.to_thread(self.server.shutdown)
            self.server.server_close()
        if self._server_task:
            self._server_task.cancel()
            try:
                await self._server_task
            except asyncio.CancelledError:
                pass
        logger.info("HTTP server stopped")
