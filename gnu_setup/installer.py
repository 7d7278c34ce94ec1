"""
Installation execution.

Runs external commands as steps and installs Homebrew packages one at a
time. A failing package is recorded and the run moves on to the next one.
"""

from __future__ import annotations

import subprocess
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Sequence

from .common import vlog
from .tools import GnuPackage

if TYPE_CHECKING:
    from .package_managers import Homebrew


@dataclass(frozen=True)
class Step:
    """
    A single external command.

    Attributes:
        description: Human-readable description
        command: Command and arguments
        requires_sudo: Prefix the command with sudo
        stdin: Text fed to the command's standard input
        interactive: Inherit the terminal instead of capturing output
    """
    description: str
    command: tuple[str, ...]
    requires_sudo: bool = False
    stdin: str | None = None
    interactive: bool = False


@dataclass(frozen=True)
class StepResult:
    """
    Result of executing a single step.

    Attributes:
        step: The step that was executed
        success: Whether the step succeeded
        stdout: Standard output from command execution
        stderr: Standard error from command execution
        exit_code: Process exit code (-1 when the process never ran to completion)
        duration_seconds: Time taken to execute step
        error_message: Human-readable error message if failed
    """
    step: Step
    success: bool
    stdout: str
    stderr: str
    exit_code: int
    duration_seconds: float
    error_message: str | None = None


@dataclass(frozen=True)
class InstallResult:
    """
    Outcome for one package.

    Attributes:
        package: Package that was processed
        success: Whether the package is installed afterwards
        already_installed: True when nothing had to be done
        step_result: Result of `brew install` (None when skipped)
        error_message: Human-readable error message if failed
    """
    package: GnuPackage
    success: bool
    already_installed: bool = False
    step_result: StepResult | None = None
    error_message: str | None = None


@dataclass(frozen=True)
class BulkInstallResult:
    """
    Aggregate outcome of installing the package list.

    Attributes:
        results: Per-package results in install order
        duration_seconds: Total execution time
    """
    results: tuple[InstallResult, ...]
    duration_seconds: float = 0.0

    @property
    def installed(self) -> tuple[InstallResult, ...]:
        return tuple(r for r in self.results if r.success and not r.already_installed)

    @property
    def skipped(self) -> tuple[InstallResult, ...]:
        return tuple(r for r in self.results if r.already_installed)

    @property
    def failures(self) -> tuple[InstallResult, ...]:
        return tuple(r for r in self.results if not r.success)

    @property
    def all_succeeded(self) -> bool:
        return not self.failures


def execute_step(
    step: Step,
    timeout: int | None = None,
    verbose: bool = False,
) -> StepResult:
    """
    Execute a single step.

    Args:
        step: Step to execute
        timeout: Command timeout in seconds
        verbose: Enable verbose logging

    Returns:
        StepResult with execution outcome
    """
    start_time = time.time()

    command = list(step.command)
    if step.requires_sudo:
        command = ["sudo"] + command

    vlog(f"Executing: {' '.join(command)}", verbose)

    try:
        if step.interactive:
            result = subprocess.run(
                command,
                input=step.stdin,
                text=True,
                timeout=timeout,
                check=False,
            )
        else:
            result = subprocess.run(
                command,
                input=step.stdin,
                capture_output=True,
                text=True,
                timeout=timeout,
                check=False,
            )

        duration = time.time() - start_time
        success = result.returncode == 0
        stdout = result.stdout or ""
        stderr = result.stderr or ""

        error_msg = None
        if not success:
            error_msg = f"Command failed with exit code {result.returncode}"
            if stderr:
                error_msg += f": {stderr.strip()[:200]}"

        return StepResult(
            step=step,
            success=success,
            stdout=stdout,
            stderr=stderr,
            exit_code=result.returncode,
            duration_seconds=duration,
            error_message=error_msg,
        )

    except subprocess.TimeoutExpired:
        return StepResult(
            step=step,
            success=False,
            stdout="",
            stderr="",
            exit_code=-1,
            duration_seconds=time.time() - start_time,
            error_message=f"Command timed out after {timeout}s",
        )
    except FileNotFoundError:
        return StepResult(
            step=step,
            success=False,
            stdout="",
            stderr="",
            exit_code=-1,
            duration_seconds=time.time() - start_time,
            error_message=f"Command not found: {command[0]}",
        )
    except OSError as e:
        return StepResult(
            step=step,
            success=False,
            stdout="",
            stderr="",
            exit_code=-1,
            duration_seconds=time.time() - start_time,
            error_message=f"Unexpected error: {e}",
        )


def install_package(
    brew: Homebrew,
    package: GnuPackage,
    timeout: int | None = None,
    on_install: Callable[[GnuPackage], None] | None = None,
    verbose: bool = False,
) -> InstallResult:
    """
    Install a package unless Homebrew already has it.

    Args:
        brew: Homebrew handle
        package: Package to install
        timeout: Timeout for `brew install`
        on_install: Called right before `brew install` runs
        verbose: Enable verbose logging

    Returns:
        InstallResult for the package
    """
    if brew.is_installed(package.name):
        vlog(f"{package.name} already installed, skipping", verbose)
        return InstallResult(package=package, success=True, already_installed=True)

    if on_install is not None:
        on_install(package)
    step_result = brew.install(package.name, timeout=timeout, verbose=verbose)
    if step_result.success:
        return InstallResult(package=package, success=True, step_result=step_result)

    vlog(f"Install failed for {package.name}: {step_result.error_message}", verbose)
    return InstallResult(
        package=package,
        success=False,
        step_result=step_result,
        error_message=step_result.error_message,
    )


def install_packages(
    brew: Homebrew,
    packages: Sequence[GnuPackage],
    timeout: int | None = None,
    on_result: Callable[[InstallResult], None] | None = None,
    on_install: Callable[[GnuPackage], None] | None = None,
    verbose: bool = False,
) -> BulkInstallResult:
    """
    Install packages sequentially, continuing past individual failures.

    Args:
        brew: Homebrew handle
        packages: Packages in install order
        timeout: Timeout for each `brew install`
        on_result: Called with each result as soon as it is known
        on_install: Called right before a missing package is installed
        verbose: Enable verbose logging

    Returns:
        BulkInstallResult with every package's outcome
    """
    start_time = time.time()
    results: list[InstallResult] = []

    for package in packages:
        result = install_package(
            brew, package, timeout=timeout, on_install=on_install, verbose=verbose
        )
        results.append(result)
        if on_result is not None:
            on_result(result)

    bulk = BulkInstallResult(results=tuple(results), duration_seconds=time.time() - start_time)
    vlog(
        f"Install summary: {len(bulk.installed)} installed, {len(bulk.skipped)} already present, "
        f"{len(bulk.failures)} failed",
        verbose,
    )
    return bulk
