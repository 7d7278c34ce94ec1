"""
Terminal output for the setup steps.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TYPE_CHECKING

from .logging_config import log_step
from .tools import TOOL_LIST_TEXT

if TYPE_CHECKING:
    from .workflow import SetupOutcome


# Environment options
USE_COLOR = os.environ.get("GNU_SETUP_COLOR", "1") == "1"

# ANSI color codes
RED = "\033[0;31m"
GREEN = "\033[0;32m"
YELLOW = "\033[1;33m"
BLUE = "\033[0;34m"
RESET = "\033[0m"

RULE = "=" * 40


def colorize(text: str, color: str) -> str:
    """Apply color to text.

    Args:
        text: Text to colorize
        color: ANSI color code

    Returns:
        Colored text or plain text if colors disabled
    """
    if not USE_COLOR or not text:
        return text
    return f"{color}{text}{RESET}"


def print_header(title: str) -> None:
    log_step(logging.INFO, f"== {title} ==")
    print(colorize(RULE, BLUE))
    print(colorize(title, BLUE))
    print(colorize(RULE, BLUE))


def print_success(msg: str) -> None:
    log_step(logging.INFO, msg)
    print(colorize(f"✓ {msg}", GREEN))


def print_warning(msg: str) -> None:
    log_step(logging.WARNING, msg)
    print(colorize(f"⚠ {msg}", YELLOW))


def print_error(msg: str) -> None:
    log_step(logging.ERROR, msg)
    print(colorize(f"✗ {msg}", RED))


def print_info(msg: str) -> None:
    log_step(logging.INFO, msg)
    print(f"  {msg}")


def clear_screen() -> None:
    """Clear the terminal when attached to one."""
    if sys.stdout.isatty():
        print("\033[2J\033[H", end="", flush=True)


def print_summary(outcome: SetupOutcome) -> None:
    """Print the closing report.

    Args:
        outcome: Result of the whole setup run
    """
    print_header("Installation Complete!")
    print()

    failures = outcome.install.failures
    if outcome.ok:
        log_step(logging.INFO, "All GNU tools installed and configured")
        print(colorize("✓ All GNU tools installed and configured", GREEN))
    else:
        if failures:
            names = ", ".join(r.package.name for r in failures)
            print_error(f"{len(failures)} package(s) failed to install: {names}")
        if outcome.verification is not None and not outcome.verification.ok:
            names = ", ".join(r.check.command for r in outcome.verification.failures)
            print_error(f"Verification failed for: {names}")
        config_errors = [u for u in outcome.config_updates if not u.success]
        if config_errors:
            print_error(f"{len(config_errors)} shell config file(s) could not be updated")

    print()
    print(f"{colorize('⚠  RESTART YOUR SHELL: ', YELLOW)}{colorize('exec $SHELL', BLUE)}")
    print()
    print(f"Verify with: {colorize('sed --version', BLUE)} or {colorize('ls --version', BLUE)}")
    print()


def print_tool_list() -> None:
    print()
    print(TOOL_LIST_TEXT)
