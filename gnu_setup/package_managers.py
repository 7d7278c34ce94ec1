"""
Homebrew detection, bootstrap and package queries.

Homebrew is the only package manager this setup drives. Missing Homebrew
is installed with the official installer script; if that fails the run
cannot continue.
"""

from __future__ import annotations

import os
import shutil
import subprocess
import urllib.request
from dataclasses import dataclass

from .common import SetupError, prepend_path, vlog
from .environment import APPLE_SILICON_PREFIX, INTEL_PREFIX, Environment
from .installer import Step, StepResult, execute_step


HOMEBREW_INSTALL_URL = "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh"

# Where the installer puts brew, checked after a fresh install
BREW_CANDIDATES = (
    f"{APPLE_SILICON_PREFIX}/bin/brew",
    f"{INTEL_PREFIX}/bin/brew",
)


class HomebrewBootstrapError(SetupError):
    """Raised when Homebrew is missing and could not be installed."""


@dataclass(frozen=True)
class Homebrew:
    """
    Handle on a Homebrew installation.

    Attributes:
        executable: Path to the brew binary
    """
    executable: str

    def _run(self, *args: str, timeout: int | None = 30) -> subprocess.CompletedProcess:
        return subprocess.run(
            [self.executable, *args],
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )

    def version(self) -> str:
        """First line of `brew --version`, empty when it cannot be read."""
        try:
            result = self._run("--version")
        except (OSError, subprocess.TimeoutExpired):
            return ""
        if result.returncode != 0 or not result.stdout:
            return ""
        return result.stdout.splitlines()[0].strip()

    def prefix(self, env: Environment | None = None, verbose: bool = False) -> str:
        """
        Resolve Homebrew's install prefix.

        Uses `brew --prefix`; falls back to the directory two levels above
        the brew binary, then to the architecture default.

        Args:
            env: Host environment for the architecture fallback
            verbose: Enable verbose logging

        Returns:
            Prefix path without trailing slash
        """
        try:
            result = self._run("--prefix")
            if result.returncode == 0 and result.stdout.strip():
                prefix = result.stdout.strip().rstrip("/")
                vlog(f"brew --prefix: {prefix}", verbose)
                return prefix
        except (OSError, subprocess.TimeoutExpired) as e:
            vlog(f"brew --prefix failed: {e}", verbose)

        bin_dir = os.path.dirname(self.executable)
        if os.path.basename(bin_dir) == "bin":
            return os.path.dirname(bin_dir)

        if env is not None:
            return env.default_brew_prefix
        return APPLE_SILICON_PREFIX

    def is_installed(self, package: str) -> bool:
        """Check `brew list <package>`."""
        try:
            result = self._run("list", package)
        except (OSError, subprocess.TimeoutExpired):
            return False
        return result.returncode == 0

    def install(self, package: str, timeout: int | None = None, verbose: bool = False) -> StepResult:
        """
        Run `brew install <package>`.

        Builds can take many minutes, so brew writes its progress straight
        to the terminal instead of being captured.
        """
        step = Step(
            description=f"Install {package} with Homebrew",
            command=(self.executable, "install", package),
            interactive=True,
        )
        return execute_step(step, timeout=timeout, verbose=verbose)


def find_brew() -> Homebrew | None:
    """Locate brew on PATH."""
    path = shutil.which("brew")
    if path:
        return Homebrew(executable=path)
    return None


def activate_brew(executable: str, verbose: bool = False) -> None:
    """
    Make a freshly installed brew usable by this process.

    Equivalent of `eval "$(brew shellenv)"`: exports HOMEBREW_PREFIX and
    puts the prefix's bin and sbin directories at the front of PATH.

    Args:
        executable: Path to the brew binary
        verbose: Enable verbose logging
    """
    prefix = os.path.dirname(os.path.dirname(executable))
    os.environ["HOMEBREW_PREFIX"] = prefix
    os.environ["PATH"] = prepend_path([f"{prefix}/bin", f"{prefix}/sbin"])
    vlog(f"Activated Homebrew at {prefix}", verbose)


def fetch_install_script(url: str = HOMEBREW_INSTALL_URL, timeout: int = 30) -> str:
    """
    Download the Homebrew installer script.

    Raises:
        HomebrewBootstrapError: If the script cannot be downloaded
    """
    try:
        req = urllib.request.Request(url, headers={"User-Agent": "gnu-tools-setup/1.0"})
        with urllib.request.urlopen(req, timeout=timeout) as response:
            return response.read().decode("utf-8")
    except Exception as e:
        raise HomebrewBootstrapError(
            f"Failed to download Homebrew installer: {e}",
            remediation="Check your network connection or install Homebrew manually from https://brew.sh",
        ) from e


def install_homebrew(verbose: bool = False) -> StepResult:
    """
    Run the official Homebrew installer.

    The installer asks for confirmation and a sudo password, so it runs
    attached to the terminal.
    """
    script = fetch_install_script()
    step = Step(
        description="Install Homebrew",
        command=("/bin/bash", "-c", script),
        interactive=True,
    )
    return execute_step(step, verbose=verbose)


def ensure_homebrew(verbose: bool = False) -> tuple[Homebrew, bool]:
    """
    Return a usable Homebrew, installing it first if it is missing.

    Args:
        verbose: Enable verbose logging

    Returns:
        Tuple of (Homebrew handle, whether it was installed by this call)

    Raises:
        HomebrewBootstrapError: If Homebrew is missing and installing it fails
    """
    brew = find_brew()
    if brew is not None:
        vlog(f"Found brew at {brew.executable}", verbose)
        return brew, False

    result = install_homebrew(verbose=verbose)
    if not result.success:
        vlog(f"Homebrew installer failed: {result.error_message}", verbose)

    for candidate in BREW_CANDIDATES:
        if os.path.isfile(candidate):
            activate_brew(candidate, verbose=verbose)
            break

    brew = find_brew()
    if brew is None:
        raise HomebrewBootstrapError(
            "Failed to install Homebrew",
            remediation="Install Homebrew manually from https://brew.sh and re-run the setup.",
        )
    return brew, True
