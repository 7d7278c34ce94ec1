"""
Idempotent shell startup file editing.

A text block is appended to a file only when a marker is not already in
it. Existing lines are never parsed or rewritten, so running the setup
again leaves configured files untouched.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from .common import vlog
from .tools import PACKAGES, GnuPackage


# Presence of this path fragment means the PATH block was added before
PATH_MARKER = "opt/coreutils/libexec/gnubin"

BASH_PROFILE_MARKER = re.compile(r"source.*bashrc")

BASH_PROFILE_BLOCK = """
# Source .bashrc if it exists
if [ -f ~/.bashrc ]; then
    source ~/.bashrc
fi
"""


@dataclass(frozen=True)
class ConfigUpdate:
    """
    Outcome of editing one file.

    Attributes:
        path: File that was examined
        label: Display name (e.g., ".bashrc (bash)")
        created: The file did not exist and was created
        appended: The block was appended
        already_configured: The marker was found, nothing was written
        skipped: The file was absent and creation was not allowed
        error_message: Set when the file could not be read or written
    """
    path: str
    label: str
    created: bool = False
    appended: bool = False
    already_configured: bool = False
    skipped: bool = False
    error_message: str | None = None

    @property
    def success(self) -> bool:
        return self.error_message is None


def render_path_block(prefix: str, packages: Sequence[GnuPackage] = PACKAGES) -> str:
    """
    Build the PATH block for a Homebrew prefix.

    Each line prepends to PATH, so the last line ends up first:
    ``<prefix>/bin`` wins, then the gnubin directories in reverse order.

    Args:
        prefix: Homebrew prefix (e.g., "/opt/homebrew")
        packages: Packages to take gnubin directories from

    Returns:
        Block text starting with a blank line
    """
    prefix = prefix.rstrip("/")
    lines = ["", "# Use GNU tools instead of BSD tools"]
    for package in packages:
        if package.gnubin:
            lines.append(f'export PATH="{prefix}/opt/{package.name}/libexec/gnubin:$PATH"')
    lines.append(f'export PATH="{prefix}/bin:$PATH"')
    return "\n".join(lines) + "\n"


def has_marker(content: str, marker: str | re.Pattern[str]) -> bool:
    """Check content for a literal substring or a compiled pattern."""
    if isinstance(marker, re.Pattern):
        return marker.search(content) is not None
    return marker in content


def ensure_block(
    path: str | os.PathLike[str],
    marker: str | re.Pattern[str],
    block: str,
    label: str | None = None,
    create: bool = True,
    verbose: bool = False,
) -> ConfigUpdate:
    """
    Append a block to a file unless the marker is already present.

    Args:
        path: File to edit
        marker: Literal substring or compiled regex proving prior configuration
        block: Text appended verbatim when the marker is absent
        label: Display name for reporting (defaults to the path)
        create: Create the file when missing; otherwise report it as skipped
        verbose: Enable verbose logging

    Returns:
        ConfigUpdate describing what happened
    """
    file_path = Path(path).expanduser()
    label = label or str(file_path)
    created = False

    try:
        if not file_path.exists():
            if not create:
                vlog(f"{file_path} does not exist, not creating it", verbose)
                return ConfigUpdate(path=str(file_path), label=label, skipped=True)
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.touch()
            created = True
            vlog(f"Created {file_path}", verbose)

        content = file_path.read_text(encoding="utf-8", errors="replace")
        if has_marker(content, marker):
            vlog(f"Marker found in {file_path}, leaving it unchanged", verbose)
            return ConfigUpdate(
                path=str(file_path),
                label=label,
                created=created,
                already_configured=True,
            )

        with open(file_path, "a", encoding="utf-8") as f:
            f.write(block)
        vlog(f"Appended {len(block.splitlines())} lines to {file_path}", verbose)

    except OSError as e:
        return ConfigUpdate(
            path=str(file_path),
            label=label,
            created=created,
            error_message=f"Could not update {file_path}: {e}",
        )

    return ConfigUpdate(path=str(file_path), label=label, created=created, appended=True)


def update_shell_configs(
    prefix: str,
    home: str | os.PathLike[str] | None = None,
    packages: Sequence[GnuPackage] = PACKAGES,
    verbose: bool = False,
) -> list[ConfigUpdate]:
    """
    Put the GNU tools first on PATH in every relevant startup file.

    Order: ~/.bashrc, ~/.bash_profile (made to source ~/.bashrc),
    ~/.profile, and ~/.zshrc only when the user already has one.

    Args:
        prefix: Homebrew prefix used in the PATH lines
        home: Home directory (defaults to the current user's)
        packages: Packages to take gnubin directories from
        verbose: Enable verbose logging

    Returns:
        One ConfigUpdate per file, in the order above
    """
    home_dir = Path(home) if home is not None else Path.home()
    block = render_path_block(prefix, packages)

    return [
        ensure_block(home_dir / ".bashrc", PATH_MARKER, block, label=".bashrc (bash)", verbose=verbose),
        ensure_block(
            home_dir / ".bash_profile",
            BASH_PROFILE_MARKER,
            BASH_PROFILE_BLOCK,
            label=".bash_profile",
            verbose=verbose,
        ),
        ensure_block(home_dir / ".profile", PATH_MARKER, block, label=".profile (universal)", verbose=verbose),
        ensure_block(home_dir / ".zshrc", PATH_MARKER, block, label=".zshrc", create=False, verbose=verbose),
    ]
