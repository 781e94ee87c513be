"""Wire protocol — request/response models and the dispatch into a Repository.

Each request and each response is a single JSON document on one line.
Requests are tagged by ``op``; responses are an envelope holding either
``ok`` (the payload) or ``err``::

    {"op": "add_release", "name": "hello_bin", "version": {"major": 1, "minor": 0, "patch": 4}}
    {"ok": null}
    {"err": {"kind": "repo", "repo": "InvalidVersion"}}
"""

from __future__ import annotations

import json
import logging
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from semver_repo.errors import RepoError, RepoErrorKind
from semver_repo.models import Crate, CrateKind, Metadata
from semver_repo.repository import Repository
from semver_repo.semver import MAX_COMPONENT, SemVer

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Payload models
# ---------------------------------------------------------------------------


class SemVerModel(BaseModel):
    """Mirrors semver_repo.semver.SemVer."""

    major: int = Field(ge=0, le=MAX_COMPONENT)
    minor: int = Field(ge=0, le=MAX_COMPONENT)
    patch: int = Field(ge=0, le=MAX_COMPONENT)

    @classmethod
    def from_domain(cls, version: SemVer) -> SemVerModel:
        return cls(major=version.major, minor=version.minor, patch=version.patch)

    def to_domain(self) -> SemVer:
        return SemVer(self.major, self.minor, self.patch)


class MetadataModel(BaseModel):
    """Mirrors semver_repo.models.Metadata."""

    name: str = Field(min_length=1)
    author: str
    kind: CrateKind

    @classmethod
    def from_domain(cls, metadata: Metadata) -> MetadataModel:
        return cls(name=metadata.name, author=metadata.author, kind=metadata.kind)

    def to_domain(self) -> Metadata:
        return Metadata(name=self.name, author=self.author, kind=self.kind)


class CrateModel(BaseModel):
    """Mirrors semver_repo.models.Crate."""

    metadata: MetadataModel
    release_history: list[SemVerModel] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, crate: Crate) -> CrateModel:
        return cls(
            metadata=MetadataModel.from_domain(crate.metadata),
            release_history=[SemVerModel.from_domain(v) for v in crate.releases],
        )

    def to_domain(self) -> Crate:
        crate = Crate(self.metadata.to_domain())
        for version in self.release_history:
            crate.add_release(version.to_domain())
        return crate


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class FindExact(BaseModel):
    op: Literal["find_exact"] = "find_exact"
    name: str


class FindAllContaining(BaseModel):
    op: Literal["find_all_containing"] = "find_all_containing"
    substring: str = ""


class AddCrate(BaseModel):
    op: Literal["add_crate"] = "add_crate"
    metadata: MetadataModel
    version: SemVerModel


class AddRelease(BaseModel):
    op: Literal["add_release"] = "add_release"
    name: str
    version: SemVerModel


Request = Annotated[
    Union[FindExact, FindAllContaining, AddCrate, AddRelease],
    Field(discriminator="op"),
]

_request_adapter: TypeAdapter[Request] = TypeAdapter(Request)


def encode_request(request: Request) -> str:
    return request.model_dump_json()


def decode_request(line: str | bytes) -> Request:
    """Parse one request line. Raises ``pydantic.ValidationError``."""
    return _request_adapter.validate_json(line)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class ApiError(BaseModel):
    """Either an internal failure or one of the repository errors."""

    kind: Literal["internal", "repo"]
    repo: Optional[RepoErrorKind] = None

    @classmethod
    def internal(cls) -> ApiError:
        return cls(kind="internal")

    @classmethod
    def from_repo(cls, error: RepoError) -> ApiError:
        return cls(kind="repo", repo=error.kind)


class Response(BaseModel):
    """Result envelope. ``ok`` holds JSON-ready payload data."""

    ok: Any = None
    err: Optional[ApiError] = None

    @property
    def is_ok(self) -> bool:
        return self.err is None

    @classmethod
    def success(cls, payload: Any = None) -> Response:
        return cls(ok=payload)

    @classmethod
    def failure(cls, error: ApiError) -> Response:
        return cls(err=error)


_INTERNAL_ERROR_JSON = json.dumps({"err": {"kind": "internal"}})


def encode_response(response: Response) -> str:
    if response.err is not None:
        return json.dumps({"err": response.err.model_dump(mode="json", exclude_none=True)})
    return json.dumps({"ok": response.ok})


def decode_response(line: str | bytes) -> Response:
    return Response.model_validate_json(line)


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


def dispatch(repository: Repository, request: Request) -> Response:
    """Run ``request`` against ``repository`` and wrap the outcome."""
    if isinstance(request, FindExact):
        crate = repository.find_exact(request.name)
        return Response.success(_crate_payload(crate) if crate is not None else None)

    if isinstance(request, FindAllContaining):
        crates = repository.find_containing(request.substring)
        return Response.success([_crate_payload(c) for c in crates])

    try:
        if isinstance(request, AddCrate):
            repository.add_crate(request.metadata.to_domain(), request.version.to_domain())
        elif isinstance(request, AddRelease):
            repository.add_release(request.name, request.version.to_domain())
        else:
            raise TypeError(f"unknown request type: {type(request).__name__}")
    except RepoError as e:
        return Response.failure(ApiError.from_repo(e))
    return Response.success()


def handle_line(repository: Repository, line: str | bytes) -> str:
    """Decode, dispatch and encode one request line.

    Anything that goes wrong outside the repository itself comes back as
    the ``internal`` error.
    """
    try:
        request = decode_request(line)
    except ValidationError as e:
        logger.warning("Could not parse request - %d validation error(s)", e.error_count())
        return _INTERNAL_ERROR_JSON

    logger.debug("-> %s", request)
    response = dispatch(repository, request)
    try:
        return encode_response(response)
    except (TypeError, ValueError) as e:
        logger.error("Could not encode response: %s", e)
        return _INTERNAL_ERROR_JSON


def _crate_payload(crate: Crate) -> dict:
    return CrateModel.from_domain(crate).model_dump(mode="json")


def crate_from_payload(payload: Any) -> Crate:
    return CrateModel.model_validate(payload).to_domain()
