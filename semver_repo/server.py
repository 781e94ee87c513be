"""TCP transport for the repository.

Connections are served one after another: read one request line, write
one response line, close. With a single connection in flight there is
only ever one writer touching the repository.
"""

from __future__ import annotations

import logging
import signal
import socketserver
import threading

from semver_repo.api import handle_line
from semver_repo.config import Settings
from semver_repo.repository import Repository

logger = logging.getLogger(__name__)

MAX_REQUEST_BYTES = 1 << 20


class RequestHandler(socketserver.StreamRequestHandler):
    server: RepositoryServer

    def handle(self):
        line = self.rfile.readline(MAX_REQUEST_BYTES)
        response = handle_line(self.server.repository, line)
        logger.debug("<- %s", response)
        try:
            self.wfile.write(response.encode("utf-8") + b"\n")
        except OSError as e:
            logger.error("Error writing to %s: %s", self.client_address, e)


class RepositoryServer(socketserver.TCPServer):
    allow_reuse_address = True

    def __init__(self, address: tuple[str, int], repository: Repository):
        super().__init__(address, RequestHandler)
        self.repository = repository

    def handle_error(self, request, client_address):
        logger.exception("Connection error from %s", client_address)


def serve(settings: Settings) -> None:
    """Serve the repository at ``settings.store`` until interrupted.

    The store is written when the server stops, however it stops. SIGTERM
    is turned into ``KeyboardInterrupt`` while serving so that it unwinds
    through the repository context like Ctrl-C does.
    """
    if settings.store is None:
        raise ValueError("missing store path (set REPO_STORE)")

    with Repository.open(settings.store) as repository:
        with RepositoryServer((settings.host, settings.port), repository) as server:
            host, port = server.server_address[:2]
            logger.info("Serving %s at %s:%s", settings.store, host, port)
            previous = _trap_sigterm()
            try:
                server.serve_forever()
            except KeyboardInterrupt:
                logger.info("Shutting down")
            finally:
                if previous is not None:
                    signal.signal(signal.SIGTERM, previous)


def _interrupt(signum, frame):
    raise KeyboardInterrupt(f"signal {signum}")


def _trap_sigterm():
    # signal handlers can only be installed from the main thread
    if threading.current_thread() is not threading.main_thread():
        return None
    return signal.signal(signal.SIGTERM, _interrupt)
