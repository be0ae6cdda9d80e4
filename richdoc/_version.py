"""Version information for richdoc.

The version is statically defined here and should match pyproject.toml.
Checkout metadata (commit and dirty state) is detected at runtime so local
builds can be told apart from released ones.
"""

import subprocess
from functools import lru_cache

__version__ = "0.1.0"


@lru_cache(maxsize=1)
def get_git_info() -> dict[str, str | None]:
    """Get git information for version display.

    Returns:
        Dict with 'sha' (short commit hash) and 'dirty' (bool as string)
    """
    try:
        sha = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            capture_output=True,
            text=True,
            timeout=5,
        )
        dirty = subprocess.run(
            ["git", "status", "--porcelain"],
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (subprocess.SubprocessError, FileNotFoundError, OSError):
        return {"sha": None, "dirty": None}
    if sha.returncode != 0:
        return {"sha": None, "dirty": None}
    return {
        "sha": sha.stdout.strip(),
        "dirty": "true" if dirty.stdout.strip() else "false",
    }


def get_version() -> str:
    return __version__


def get_full_version_string() -> str:
    """Get a human-readable version string with build info.

    Returns:
        String like "richdoc 0.1.0 (abc1234, dirty)" or "richdoc 0.1.0"
    """
    git_info = get_git_info()
    details = [git_info["sha"]] if git_info["sha"] else []
    if git_info["dirty"] == "true":
        details.append("dirty")

    version = f"richdoc {__version__}"
    return f"{version} ({', '.join(details)})" if details else version
