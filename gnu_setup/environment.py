"""
Host environment detection.

Confirms the setup runs on macOS and works out where Homebrew lives
on this machine (Apple Silicon and Intel use different prefixes).
"""

from __future__ import annotations

import platform
import sys
from dataclasses import dataclass

from .common import SetupError, vlog


# Default Homebrew prefixes by CPU architecture
APPLE_SILICON_PREFIX = "/opt/homebrew"
INTEL_PREFIX = "/usr/local"


class UnsupportedPlatformError(SetupError):
    """Raised when the host is not macOS."""


@dataclass(frozen=True)
class Environment:
    """
    Detected host information.

    Attributes:
        os_type: Value of sys.platform (e.g., "darwin", "linux")
        machine: CPU architecture reported by the OS (e.g., "arm64", "x86_64")
        os_version: macOS product version, empty when unknown
    """
    os_type: str
    machine: str
    os_version: str = ""

    @property
    def is_macos(self) -> bool:
        return self.os_type.startswith("darwin")

    @property
    def default_brew_prefix(self) -> str:
        """Homebrew's default prefix for this architecture."""
        if self.machine.startswith("arm"):
            return APPLE_SILICON_PREFIX
        return INTEL_PREFIX

    def __str__(self) -> str:
        version = f" {self.os_version}" if self.os_version else ""
        return f"{self.os_type}{version} ({self.machine})"


def detect_environment(verbose: bool = False) -> Environment:
    """
    Detect the current host.

    Args:
        verbose: Enable verbose logging

    Returns:
        Environment describing the host
    """
    os_version = ""
    if sys.platform == "darwin":
        os_version = platform.mac_ver()[0]

    env = Environment(
        os_type=sys.platform,
        machine=platform.machine(),
        os_version=os_version,
    )
    vlog(f"Detected environment: {env}", verbose)
    return env


def check_macos(env: Environment | None = None, verbose: bool = False) -> Environment:
    """
    Ensure the setup is running on macOS.

    Args:
        env: Pre-detected environment (detects if None)
        verbose: Enable verbose logging

    Returns:
        The environment, when it is macOS

    Raises:
        UnsupportedPlatformError: If the host is not macOS
    """
    if env is None:
        env = detect_environment(verbose=verbose)

    if not env.is_macos:
        raise UnsupportedPlatformError(
            f"This setup is for macOS only! Detected OS: {env.os_type}",
            remediation="Run it on a Mac; Linux distributions already ship the GNU tools.",
        )
    return env
