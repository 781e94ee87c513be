"""Runtime settings, read from the environment.

- ``REPO_STORE`` -- path of the JSON store file
- ``REPO_HOST`` -- address the server binds / the client connects to
- ``REPO_PORT`` -- TCP port (default 7878)
- ``REPO_LOG_LEVEL`` -- logging level name for the CLI, e.g. ``DEBUG``
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 7878


@dataclass
class Settings:
    store: Optional[Path] = None
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        store = env.get("REPO_STORE")
        return cls(
            store=Path(store) if store else None,
            host=env.get("REPO_HOST", DEFAULT_HOST),
            port=parse_port(env.get("REPO_PORT", str(DEFAULT_PORT))),
        )


def parse_port(value: str | int) -> int:
    try:
        port = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid port: {value!r}") from None
    if not 0 <= port <= 65535:
        raise ValueError(f"Port out of range: {port}")
    return port
