"""Client for a running repository server."""

from __future__ import annotations

import logging
import socket

from semver_repo.api import (
    AddCrate,
    AddRelease,
    FindAllContaining,
    FindExact,
    MetadataModel,
    Request,
    Response,
    SemVerModel,
    crate_from_payload,
    decode_response,
    encode_request,
)
from semver_repo.config import DEFAULT_HOST, DEFAULT_PORT
from semver_repo.errors import RepoError
from semver_repo.models import Crate, Metadata
from semver_repo.semver import SemVer

logger = logging.getLogger(__name__)


class ApiInternalError(Exception):
    """The server could not process the request."""


class RepositoryClient:
    """Sends one request per connection to a ``RepositoryServer``."""

    def __init__(self, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT, timeout: float = 5.0):
        self.host = host
        self.port = port
        self.timeout = timeout

    def find_exact(self, name: str) -> Crate | None:
        payload = self._call(FindExact(name=name))
        return crate_from_payload(payload) if payload is not None else None

    def find_containing(self, substring: str = "") -> list[Crate]:
        payload = self._call(FindAllContaining(substring=substring))
        return [crate_from_payload(item) for item in payload]

    def add_crate(self, metadata: Metadata, version: SemVer) -> None:
        self._call(
            AddCrate(
                metadata=MetadataModel.from_domain(metadata),
                version=SemVerModel.from_domain(version),
            )
        )

    def add_release(self, name: str, version: SemVer) -> None:
        self._call(AddRelease(name=name, version=SemVerModel.from_domain(version)))

    def _call(self, request: Request):
        response = self.send(request)
        if response.err is not None:
            if response.err.kind == "repo" and response.err.repo is not None:
                raise RepoError.from_kind(response.err.repo)
            raise ApiInternalError("internal server error")
        return response.ok

    def send(self, request: Request) -> Response:
        """Send ``request`` and return the decoded response envelope."""
        line = encode_request(request)
        logger.debug("-> %s", line)
        with socket.create_connection((self.host, self.port), timeout=self.timeout) as conn:
            conn.sendall(line.encode("utf-8") + b"\n")
            conn.shutdown(socket.SHUT_WR)
            with conn.makefile("rb") as reader:
                raw = reader.readline()
        logger.debug("<- %s", raw)
        if not raw:
            raise ApiInternalError("server closed the connection without a response")
        return decode_response(raw)
