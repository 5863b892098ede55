"""Code provenance for result files."""

import subprocess


def get_git_hash() -> str:
    """Short SHA of HEAD, suffixed with '-dirty' for uncommitted changes.

    Returns "unknown" outside a git checkout or when git is missing.
    """
    try:
        out = subprocess.check_output(
            ["git", "describe", "--always", "--dirty", "--abbrev=7"],
            stderr=subprocess.DEVNULL,
        )
    except (subprocess.CalledProcessError, FileNotFoundError):
        return "unknown"
    return out.decode().strip() or "unknown"
