"""
Package and verification definitions.

The Homebrew formulae installed by the setup, in install order, and the
version checks used to confirm the GNU variants win on PATH.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class GnuPackage:
    """Homebrew formula to install."""
    name: str  # Homebrew formula name
    display_name: str
    gnubin: bool = False  # Ships <prefix>/opt/<name>/libexec/gnubin


@dataclass(frozen=True)
class ToolCheck:
    """
    Version check for an installed tool.

    A check with neither ``expected`` nor ``min_version`` only requires
    the command to be on PATH.

    Attributes:
        command: Binary to run with --version
        expected: Substring the version output must contain
        min_version: Lowest acceptable version (compared with packaging)
        required: Mismatch is a failure when True, a warning otherwise
        label: Short description used in success messages
    """
    command: str
    expected: str | None = None
    min_version: str | None = None
    required: bool = True
    label: str = ""


PACKAGES: tuple[GnuPackage, ...] = (
    GnuPackage("coreutils", "GNU Coreutils", gnubin=True),
    GnuPackage("gnu-sed", "GNU sed", gnubin=True),
    GnuPackage("grep", "GNU grep", gnubin=True),
    GnuPackage("findutils", "GNU findutils (find, xargs, etc.)", gnubin=True),
    GnuPackage("gawk", "GNU awk", gnubin=True),
    GnuPackage("gnu-tar", "GNU tar", gnubin=True),
    GnuPackage("make", "GNU make", gnubin=True),
    GnuPackage("diffutils", "GNU diffutils", gnubin=True),
    GnuPackage("bash", "GNU Bash"),
    GnuPackage("wget", "wget"),
    GnuPackage("watch", "watch"),
    GnuPackage("git", "git"),
    GnuPackage("less", "less"),
    GnuPackage("tmux", "tmux"),
    GnuPackage("ripgrep", "ripgrep (rg)"),
)

PACKAGE_MAP: dict[str, GnuPackage] = {p.name: p for p in PACKAGES}

# Checks run in the current process after PATH is adjusted
VERIFY_CHECKS: tuple[ToolCheck, ...] = (
    ToolCheck("sed", expected="GNU sed", label="GNU version"),
    ToolCheck("grep", expected="GNU grep", label="GNU version"),
    ToolCheck("tar", expected="GNU tar", label="GNU version"),
    ToolCheck("make", expected="GNU Make", label="GNU version"),
    ToolCheck("ls", expected="GNU coreutils", label="GNU version"),
    ToolCheck("bash", min_version="5.0", required=False, label="version 5.x"),
    ToolCheck("wget", required=False, label="installed"),
    ToolCheck("git", required=False, label="installed"),
)

# Checks run inside a fresh login shell to exercise the edited rc files
FRESH_SHELL_CHECKS: tuple[ToolCheck, ...] = (
    ToolCheck("sed", expected="GNU sed"),
    ToolCheck("grep", expected="GNU grep"),
    ToolCheck("find", expected="GNU findutils"),
    ToolCheck("ls", expected="GNU coreutils", required=False),
)

TOOL_LIST_TEXT = """\
Installed tools:
  coreutils (ls, cp, mv, rm, cat, date, etc. - 100+ utilities)
  sed, grep, find, awk, tar, make, diff
  bash 5.x, wget, watch, git, less, tmux, ripgrep
"""


def get_package(name: str) -> GnuPackage | None:
    return PACKAGE_MAP.get(name)


def select_packages(skip: list[str] | tuple[str, ...] = ()) -> list[GnuPackage]:
    """Packages to install, in order, minus the skipped names."""
    skip_set = {s.lower() for s in skip}
    return [p for p in PACKAGES if p.name.lower() not in skip_set]


def gnubin_dirs(prefix: str, packages: list[GnuPackage] | tuple[GnuPackage, ...] = PACKAGES) -> list[str]:
    """
    PATH directories for the gnubin packages, highest priority first.

    The result mirrors what the shell block produces: ``<prefix>/bin``
    first, then each gnubin directory in reverse list order (later
    ``export PATH=...:$PATH`` lines win).

    Args:
        prefix: Homebrew prefix (e.g., "/opt/homebrew")
        packages: Packages to take gnubin directories from

    Returns:
        Directories in PATH order
    """
    prefix = prefix.rstrip("/")
    dirs = [f"{prefix}/opt/{p.name}/libexec/gnubin" for p in packages if p.gnubin]
    return [f"{prefix}/bin"] + list(reversed(dirs))
