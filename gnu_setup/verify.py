"""
Post-install verification.

Runs each tool with --version and looks for the vendor string, proving
that the GNU variant rather than the BSD one is found first on PATH.
Every check runs; a mismatch is recorded, never raised.
"""

from __future__ import annotations

import os
import re
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from typing import Callable, Sequence

from packaging.version import InvalidVersion, Version

from .common import vlog
from .tools import ToolCheck


PASS = "pass"
WARN = "warn"
FAIL = "fail"

_VERSION_RE = re.compile(r"\d+\.\d+(?:\.\d+)?")

# Runs a check's command and returns (found, combined output)
Runner = Callable[[ToolCheck], tuple[bool, str]]


@dataclass(frozen=True)
class CheckResult:
    """
    Result of one tool check.

    Attributes:
        check: The check that was run
        status: "pass", "warn" or "fail"
        first_line: First line of the tool's version output
        message: Human-readable outcome
    """
    check: ToolCheck
    status: str
    first_line: str = ""
    message: str = ""


@dataclass(frozen=True)
class VerificationReport:
    """Aggregate of all check results."""
    results: tuple[CheckResult, ...]

    @property
    def failures(self) -> tuple[CheckResult, ...]:
        return tuple(r for r in self.results if r.status == FAIL)

    @property
    def warnings(self) -> tuple[CheckResult, ...]:
        return tuple(r for r in self.results if r.status == WARN)

    @property
    def ok(self) -> bool:
        return not self.failures


def extract_version(output: str) -> str | None:
    """First dotted version number in the output, if any."""
    match = _VERSION_RE.search(output)
    return match.group(0) if match else None


def evaluate(check: ToolCheck, found: bool, output: str) -> CheckResult:
    """
    Decide pass/warn/fail for one check.

    Args:
        check: Check definition
        found: Whether the command exists
        output: Combined stdout/stderr of `<command> --version`

    Returns:
        CheckResult for the check
    """
    first_line = output.strip().splitlines()[0].strip() if output.strip() else ""
    bad = FAIL if check.required else WARN
    label = check.label or "ok"

    if not found:
        return CheckResult(check, bad, message=f"{check.command}: not found")

    if check.expected is not None and check.expected not in output:
        return CheckResult(
            check, bad, first_line,
            message=f"{check.command}: {check.expected} not found (got: {first_line or 'no output'})",
        )

    if check.min_version is not None:
        found_version = extract_version(output)
        try:
            too_old = found_version is None or Version(found_version) < Version(check.min_version)
        except InvalidVersion:
            too_old = True
        if too_old:
            return CheckResult(
                check, bad, first_line,
                message=f"{check.command}: not {label} (found {found_version or 'unknown'})",
            )

    return CheckResult(check, PASS, first_line, message=f"{check.command}: {label}")


def path_runner(path: str, timeout: int = 10) -> Runner:
    """
    Runner that resolves commands against a given PATH.

    Args:
        path: PATH string used for lookup and passed to the child
        timeout: Timeout per command in seconds
    """
    env = dict(os.environ)
    env["PATH"] = path

    def run(check: ToolCheck) -> tuple[bool, str]:
        executable = shutil.which(check.command, path=path)
        if executable is None:
            return False, ""
        if check.expected is None and check.min_version is None:
            return True, ""
        try:
            result = subprocess.run(
                [executable, "--version"],
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                env=env,
                timeout=timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            return True, f"error: {e}"
        return True, result.stdout or ""

    return run


def login_shell_runner(shell: str = "bash", timeout: int = 30) -> Runner:
    """
    Runner that executes checks inside a fresh login shell.

    The login shell reads the startup files, so this shows what a new
    terminal will see.
    """
    def run(check: ToolCheck) -> tuple[bool, str]:
        command = f"{shlex.quote(check.command)} --version 2>&1 | head -1"
        try:
            result = subprocess.run(
                [shell, "-l", "-c", command],
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                timeout=timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            return False, f"error: {e}"
        return True, result.stdout or ""

    return run


def verify_tools(
    checks: Sequence[ToolCheck],
    runner: Runner,
    on_result: Callable[[CheckResult], None] | None = None,
    verbose: bool = False,
) -> VerificationReport:
    """
    Run every check and aggregate the results.

    Args:
        checks: Checks to run, in order
        runner: How to execute a check
        on_result: Called with each result as soon as it is known
        verbose: Enable verbose logging

    Returns:
        VerificationReport covering all checks
    """
    results = []
    for check in checks:
        found, output = runner(check)
        result = evaluate(check, found, output)
        vlog(f"Verify {check.command}: {result.status} ({result.first_line})", verbose)
        results.append(result)
        if on_result is not None:
            on_result(result)
    return VerificationReport(results=tuple(results))
