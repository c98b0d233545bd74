"""
Status server module for DNS-Failover.

This module exposes the outcome of the latest reconciliation when running as a
daemon, for liveness checks and scraping.
"""

import json
import logging
from http.server import BaseHTTPRequestHandler, HTTPServer
from threading import Thread


class StatusHandler(BaseHTTPRequestHandler):
    """
    HTTP request handler for status endpoints.
    """

    def __init__(self, *args, **kwargs):
        self.logger = logging.getLogger("dns-failover.status")
        super().__init__(*args, **kwargs)

    def do_GET(self):
        """
        Handle GET requests.
        """
        if self.path == "/health":
            self._handle_health_check()
        elif self.path == "/metrics":
            self._handle_metrics()
        else:
            self.send_response(404)
            self.end_headers()
            self.wfile.write(b"Not Found")

    def _handle_health_check(self):
        controller = self.server.controller
        result = controller.last_result

        response = {
            "status": "healthy" if controller.healthy else "unhealthy",
            "runs": controller.runs_total,
        }
        if result is not None:
            response["desired_ip"] = result.desired_ip
            response["published_ip"] = result.published_ip
            response["primary"] = result.status.value
        if controller.last_error is not None:
            response["error"] = str(controller.last_error)

        self.send_response(200 if controller.healthy else 503)
        self.send_header("Content-type", "application/json")
        self.end_headers()
        self.wfile.write(json.dumps(response).encode())

    def _handle_metrics(self):
        controller = self.server.controller
        result = controller.last_result
        at_primary = 1 if result is not None and result.at_primary else 0

        self.send_response(200)
        self.send_header("Content-type", "text/plain")
        self.end_headers()

        metrics = [
            "# HELP dns_failover_up Whether the DNS-Failover service is up",
            "# TYPE dns_failover_up gauge",
            "dns_failover_up 1",
            "# HELP dns_failover_runs_total Reconciliation passes started",
            "# TYPE dns_failover_runs_total counter",
            f"dns_failover_runs_total {controller.runs_total}",
            "# HELP dns_failover_failures_total Reconciliation passes that failed",
            "# TYPE dns_failover_failures_total counter",
            f"dns_failover_failures_total {controller.failures_total}",
            "# HELP dns_failover_writes_total DNS record updates issued",
            "# TYPE dns_failover_writes_total counter",
            f"dns_failover_writes_total {controller.writes_total}",
            "# HELP dns_failover_at_primary Whether the record points at the primary",
            "# TYPE dns_failover_at_primary gauge",
            f"dns_failover_at_primary {at_primary}",
        ]

        self.wfile.write(("\n".join(metrics) + "\n").encode())

    def log_message(self, format, *args):
        """
        Override log_message to use the application logger.
        """
        self.logger.debug(format % args)


class StatusServer:
    """
    HTTP server for status endpoints.
    """

    def __init__(self, controller, host: str = "0.0.0.0", port: int = 8080):
        """
        Initialize a StatusServer.

        Args:
            controller: Controller whose state is reported
            host: Host to bind to
            port: Port to bind to (0 picks a free port)
        """
        self.controller = controller
        self.host = host
        self.port = port
        self.server = None
        self.thread = None
        self.logger = logging.getLogger("dns-failover.status")

    def start(self):
        """
        Start the status server.
        """
        self.server = HTTPServer((self.host, self.port), StatusHandler)
        self.server.controller = self.controller
        self.port = self.server.server_address[1]
        self.thread = Thread(target=self.server.serve_forever)
        self.thread.daemon = True
        self.thread.start()
        self.logger.info(f"Status server: {self.host}:{self.port}/health")

    def stop(self):
        """
        Stop the status server.
        """
        if self.server:
            self.server.shutdown()
            self.server.server_close()
            self.logger.info("Status server stopped")
