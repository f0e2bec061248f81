"""Version information for mcp-google-sheets."""

from pathlib import Path


def _get_version() -> str:
    """Get version from the packaged VERSION file or fall back to hardcoded."""
    pkg_version = Path(__file__).parent / "VERSION"
    if pkg_version.exists():
        return pkg_version.read_text().strip()

    return "1.0.0"


__version__ = _get_version()
