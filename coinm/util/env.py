from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Dict

# KEY=value, optionally preceded by ``export``; quotes around the value are dropped.
_ASSIGNMENT = re.compile(
    r"""^(?:export\s+)?(?P<key>[A-Za-z_][A-Za-z0-9_.]*)\s*=\s*(?P<value>"[^"]*"|'[^']*'|.*?)\s*$"""
)


def read_env_file(path: str | Path) -> Dict[str, str]:
    """Parse ``KEY=value`` lines; comments and malformed lines are skipped."""

    env_path = Path(path)
    if not env_path.is_file():
        return {}
    values: Dict[str, str] = {}
    for line in env_path.read_text(encoding="utf-8").splitlines():
        match = _ASSIGNMENT.match(line.strip())
        if match is None:
            continue
        value = match.group("value")
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        values[match.group("key")] = value
    return values


def load_env_file(path: str | Path = ".env") -> None:
    """Export the credentials in ``path`` unless the shell already set them."""

    for key, value in read_env_file(path).items():
        os.environ.setdefault(key, value)


def env_first(*names: str) -> str | None:
    """Return the first non-empty environment variable among ``names``."""

    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return None
