"""
Login shell registration.

chsh only accepts shells listed in /etc/shells, so Homebrew's bash has to
be registered there (as root) before it can become the default shell.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from .common import vlog
from .installer import Step, StepResult, execute_step


SHELLS_FILE = "/etc/shells"


@dataclass(frozen=True)
class ShellChange:
    """
    Outcome of a registration or default-shell change.

    Attributes:
        shell_path: Shell binary concerned
        changed: Something was modified
        already_done: The desired state was already in place
        step_result: Result of the command that was run, if any
        error_message: Human-readable error message if failed
    """
    shell_path: str
    changed: bool = False
    already_done: bool = False
    step_result: StepResult | None = None
    error_message: str | None = None

    @property
    def success(self) -> bool:
        return self.error_message is None


def homebrew_bash(prefix: str) -> str:
    """Path of the bash binary installed by Homebrew."""
    return f"{prefix.rstrip('/')}/bin/bash"


def is_login_shell(shell_path: str, shells_file: str = SHELLS_FILE) -> bool:
    """
    Check whether a shell is listed in the shells file.

    Lines are compared exactly after stripping whitespace; comments are ignored.
    """
    try:
        with open(shells_file, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and line == shell_path:
                    return True
    except OSError:
        return False
    return False


def register_login_shell(
    shell_path: str,
    shells_file: str = SHELLS_FILE,
    verbose: bool = False,
) -> ShellChange:
    """
    Add a shell to the shells file via `sudo tee -a`.

    Args:
        shell_path: Shell binary to register
        shells_file: System shells file
        verbose: Enable verbose logging

    Returns:
        ShellChange describing the outcome
    """
    if not os.path.isfile(shell_path):
        return ShellChange(shell_path=shell_path, error_message=f"Shell not found: {shell_path}")

    if is_login_shell(shell_path, shells_file):
        vlog(f"{shell_path} already listed in {shells_file}", verbose)
        return ShellChange(shell_path=shell_path, already_done=True)

    step = Step(
        description=f"Register {shell_path} in {shells_file}",
        command=("tee", "-a", shells_file),
        requires_sudo=True,
        stdin=f"{shell_path}\n",
    )
    result = execute_step(step, verbose=verbose)
    if not result.success:
        return ShellChange(shell_path=shell_path, step_result=result, error_message=result.error_message)
    return ShellChange(shell_path=shell_path, changed=True, step_result=result)


def change_default_shell(shell_path: str, verbose: bool = False) -> ShellChange:
    """
    Switch the user's login shell with chsh.

    chsh prompts for the user's password, so it runs attached to the terminal.
    """
    if os.environ.get("SHELL") == shell_path:
        vlog(f"Default shell is already {shell_path}", verbose)
        return ShellChange(shell_path=shell_path, already_done=True)

    step = Step(
        description=f"Change default shell to {shell_path}",
        command=("chsh", "-s", shell_path),
        interactive=True,
    )
    result = execute_step(step, verbose=verbose)
    if not result.success:
        return ShellChange(shell_path=shell_path, step_result=result, error_message=result.error_message)
    return ShellChange(shell_path=shell_path, changed=True, step_result=result)
