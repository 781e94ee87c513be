"""File-backed crate repository.

The repository keeps every crate in memory, keyed by name, and reads its
JSON store once, when it is constructed. It writes the store back exactly once,
when it is closed, so use it as a context manager::

    with Repository("/tmp/store.json") as repo:
        repo.add_crate(Metadata("linux.exe", "Linus Torvalds"), SemVer.new(1))
"""

from __future__ import annotations

import json
import logging
import os
import stat
import tempfile
from pathlib import Path

from semver_repo.errors import AlreadyExistsError, NotFoundError, PersistenceError
from semver_repo.models import Crate, Metadata
from semver_repo.semver import SemVer

logger = logging.getLogger(__name__)


class Repository:
    """In-memory mapping of crate name to ``Crate``, persisted to ``store``."""

    def __init__(self, store: str | Path):
        """Load the crates saved at ``store``, or start empty.

        Never raises: a missing, unreadable or malformed store gives an
        empty repository that will still be written to ``store`` on close.
        """
        self.store = Path(store)
        self._crates: dict[str, Crate] = _read_store(self.store)
        self._closed = False

    @classmethod
    def open(cls, store: str | Path) -> Repository:
        return cls(store)

    # -- queries ------------------------------------------------------------

    def find_exact(self, name: str) -> Crate | None:
        """Case-sensitive lookup by name."""
        return self._crates.get(name)

    def find_containing(self, name_part: str) -> list[Crate]:
        """Case-insensitive substring search over crate names.

        An empty ``name_part`` matches everything. Result order is not
        meaningful.
        """
        needle = name_part.lower()
        return [crate for name, crate in self._crates.items() if needle in name.lower()]

    def list_all(self) -> list[Crate]:
        return list(self._crates.values())

    def __len__(self) -> int:
        return len(self._crates)

    def __contains__(self, name: object) -> bool:
        return name in self._crates

    # -- mutations ----------------------------------------------------------

    def add_crate(self, metadata: Metadata, version: SemVer) -> None:
        """Register a new crate with ``version`` as its first release.

        Raises ``AlreadyExistsError`` if the name is taken; the existing
        crate is left as it was.
        """
        self._check_open()
        if metadata.name in self._crates:
            raise AlreadyExistsError(f"crate {metadata.name!r} already exists")

        crate = Crate(metadata)
        # a fresh history accepts any first release
        crate.add_release(version)
        self._crates[metadata.name] = crate
        logger.debug("Added crate %s %s", metadata.name, version)

    def add_release(self, name: str, version: SemVer) -> None:
        """Append ``version`` to the named crate's history.

        Raises ``NotFoundError`` for an unknown name and
        ``InvalidVersionError`` if ``version`` is not newer than the
        crate's latest release.
        """
        self._check_open()
        crate = self._crates.get(name)
        if crate is None:
            raise NotFoundError(f"crate {name!r} not found")
        crate.add_release(version)
        logger.debug("Added release %s %s", name, version)

    # -- lifecycle ----------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Persist the repository. Only the first call writes anything.

        A failed write is logged rather than raised, since there is usually
        nobody left to handle it.
        """
        if self._closed:
            return
        self._closed = True
        try:
            save(self)
        except PersistenceError as e:
            logger.error("Could not save repository to %s: %s", self.store, e)

    def __enter__(self) -> Repository:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("repository is closed")

    def to_dict(self) -> dict:
        return {
            "crates": {name: crate.to_dict() for name, crate in self._crates.items()},
            "store": str(self.store),
        }

    def __repr__(self) -> str:
        return f"Repository(store={str(self.store)!r}, crates={sorted(self._crates)!r})"


def load(store: str | Path) -> Repository:
    """Read the repository saved at ``store``. See ``Repository``."""
    return Repository(store)


def _read_store(path: Path) -> dict[str, Crate]:
    if not path.exists():
        logger.info("No store at %s, starting empty", path)
        return {}

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        crates = _crates_from_dict(data)
    except Exception as e:
        logger.warning("Ignoring unreadable store %s (%s: %s)", path, type(e).__name__, e)
        return {}

    logger.debug("Loaded %d crates from %s", len(crates), path)
    return crates


def save(repository: Repository) -> None:
    """Write ``repository`` to its store, replacing what was there.

    The document is serialized before anything touches the disk and is
    moved into place with ``os.replace``, so readers never see a partial
    file.
    """
    path = repository.store
    try:
        payload = json.dumps(repository.to_dict(), indent=2, sort_keys=True)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.chmod(tmp_name, _store_mode(path))
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except (OSError, TypeError, ValueError) as e:
        raise PersistenceError(str(e)) from e

    logger.debug("Saved %d crates to %s", len(repository), path)


def _store_mode(path: Path) -> int:
    """Keep the permissions of an existing store; new ones follow the umask."""
    if path.exists():
        return stat.S_IMODE(path.stat().st_mode)
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def _crates_from_dict(data: dict) -> dict[str, Crate]:
    crates: dict[str, Crate] = {}
    for name, crate_data in data["crates"].items():
        crate = Crate.from_dict(crate_data)
        if crate.name != name:
            raise ValueError(f"store key {name!r} does not match crate {crate.name!r}")
        if crate.latest is None:
            raise ValueError(f"crate {name!r} has no releases")
        crates[name] = crate
    return crates
