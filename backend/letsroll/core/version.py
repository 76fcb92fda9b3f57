"""Application version, read from the VERSION file shipped with the repo."""

from pathlib import Path

_HERE = Path(__file__).resolve()

# Container image copies VERSION next to the package, a checkout keeps it at the repo root
_CANDIDATES = (_HERE.parents[2] / "VERSION", _HERE.parents[3] / "VERSION")


def get_version() -> str:
    for candidate in _CANDIDATES:
        if candidate.is_file():
            return candidate.read_text(encoding="utf-8").strip()
    return "0.0.0"


__version__ = get_version()
