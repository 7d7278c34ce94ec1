"""
The setup pipeline.

check OS → ensure Homebrew → install packages → register shell →
update startup files → verify → summary.

Only the first two steps can abort the run (by raising SetupError);
everything after them records failures and carries on.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from . import render
from .common import prepend_path, vlog
from .config import Config
from .environment import Environment, check_macos
from .installer import BulkInstallResult, InstallResult, install_packages
from .package_managers import Homebrew, ensure_homebrew
from .shell_config import ConfigUpdate, update_shell_configs
from .shells import ShellChange, change_default_shell, homebrew_bash, register_login_shell
from .tools import FRESH_SHELL_CHECKS, VERIFY_CHECKS, GnuPackage, gnubin_dirs, select_packages
from .verify import (
    FAIL,
    PASS,
    CheckResult,
    VerificationReport,
    login_shell_runner,
    path_runner,
    verify_tools,
)


@dataclass(frozen=True)
class SetupOutcome:
    """
    Everything the pipeline did.

    Attributes:
        environment: Detected host
        brew_prefix: Homebrew prefix used for PATH lines
        install: Package installation results
        config_updates: Per-file startup file outcomes
        shell_changes: Login shell registration/switch outcomes
        verification: In-process verification report
        fresh_shell: Login-shell verification report (None when disabled)
    """
    environment: Environment
    brew_prefix: str
    install: BulkInstallResult
    config_updates: tuple[ConfigUpdate, ...] = ()
    shell_changes: tuple[ShellChange, ...] = ()
    verification: VerificationReport | None = None
    fresh_shell: VerificationReport | None = None

    @property
    def ok(self) -> bool:
        """No install failure, no unwritable config file, no failed required check."""
        if not self.install.all_succeeded:
            return False
        if any(not u.success for u in self.config_updates):
            return False
        return self.verification is None or self.verification.ok


@dataclass
class SetupOptions:
    """Run-time switches layered over the config file."""
    fresh_shell_check: bool = True
    register_login_shell: bool = False
    change_default_shell: bool = False
    home: str | None = None
    verbose: bool = False
    extra_skip: list[str] = field(default_factory=list)

    @staticmethod
    def from_config(config: Config, verbose: bool = False) -> SetupOptions:
        return SetupOptions(
            fresh_shell_check=config.preferences.fresh_shell_check,
            register_login_shell=config.shell.register_login_shell,
            change_default_shell=config.shell.change_default_shell,
            verbose=verbose,
        )


def _report_install(result: InstallResult) -> None:
    name = result.package.display_name
    if result.already_installed:
        render.print_success(f"{name} is already installed")
    elif result.success:
        render.print_success(f"{name} installed successfully")
    else:
        render.print_error(f"Failed to install {name}")
        if result.error_message:
            render.print_info(result.error_message)


def _report_install_start(package: GnuPackage) -> None:
    render.print_info(f"Installing {package.display_name}...")


def _report_config(update: ConfigUpdate) -> None:
    if update.created:
        render.print_info(f"Created {update.path}")
    if update.error_message:
        render.print_error(update.error_message)
    elif update.already_configured:
        render.print_warning(f"{update.label} already configured (skipping)")
    elif update.appended:
        render.print_success(f"{update.label} configured")


def _report_check(result: CheckResult) -> None:
    if result.status == PASS:
        render.print_success(result.message)
    elif result.status == FAIL:
        render.print_error(result.message)
    else:
        render.print_warning(result.message)


def _report_fresh_shell(result: CheckResult) -> None:
    command = result.check.command
    if result.status == PASS:
        render.print_success(f"{command} works in new shell: {result.first_line}")
    elif result.status == FAIL:
        render.print_error(f"{command} not working in new shell")
        render.print_info("You may need to manually restart your terminal")
    else:
        render.print_warning(f"{command} not working in new shell - PATH may need manual adjustment")


def _report_shell_change(change: ShellChange, action: str) -> None:
    if change.error_message:
        render.print_warning(f"Could not {action} {change.shell_path}: {change.error_message}")
    elif change.already_done:
        render.print_warning(f"{change.shell_path}: {action} already done (skipping)")
    else:
        render.print_success(f"{change.shell_path}: {action} done")


def setup_homebrew(env: Environment, verbose: bool = False) -> tuple[Homebrew, str]:
    """
    Make sure Homebrew is usable and resolve its prefix.

    Returns:
        Tuple of (Homebrew handle, prefix)

    Raises:
        HomebrewBootstrapError: If Homebrew is missing and cannot be installed
    """
    render.print_header("Checking Homebrew")
    brew, installed_now = ensure_homebrew(verbose=verbose)
    if installed_now:
        render.print_success("Homebrew installed successfully")
    else:
        render.print_success("Homebrew is already installed")
        version = brew.version()
        if version:
            render.print_info(version)
    return brew, brew.prefix(env=env, verbose=verbose)


def run_setup(config: Config, options: SetupOptions | None = None) -> SetupOutcome:
    """
    Run the whole pipeline.

    Args:
        config: Loaded configuration
        options: Run-time switches (derived from config if None)

    Returns:
        SetupOutcome describing every step

    Raises:
        UnsupportedPlatformError: If not running on macOS
        HomebrewBootstrapError: If Homebrew is missing and cannot be installed
    """
    if options is None:
        options = SetupOptions.from_config(config)
    verbose = options.verbose

    render.print_header("Checking Operating System")
    env = check_macos(verbose=verbose)
    render.print_success("Running on macOS")

    brew, prefix = setup_homebrew(env, verbose=verbose)

    render.print_header("Installing GNU Tools")
    packages = select_packages(list(config.skip_packages) + options.extra_skip)
    install = install_packages(
        brew,
        packages,
        timeout=config.preferences.install_timeout_seconds,
        on_result=_report_install,
        on_install=_report_install_start,
        verbose=verbose,
    )
    print()
    if install.all_succeeded:
        render.print_success("All GNU tools installed")
    else:
        render.print_error(f"{len(install.failures)} of {len(install.results)} packages failed to install")

    shell_changes: list[ShellChange] = []
    if options.register_login_shell or options.change_default_shell:
        render.print_header("Registering Login Shell")
        bash_path = homebrew_bash(prefix)
        if options.register_login_shell:
            change = register_login_shell(bash_path, verbose=verbose)
            _report_shell_change(change, "register as login shell")
            shell_changes.append(change)
        if options.change_default_shell:
            change = change_default_shell(bash_path, verbose=verbose)
            _report_shell_change(change, "set as default shell")
            shell_changes.append(change)

    render.print_header("Updating Shell Configurations")
    updates = update_shell_configs(prefix, home=options.home, verbose=verbose)
    for update in updates:
        _report_config(update)
    print()
    if all(u.success for u in updates):
        render.print_success("All shell configurations updated")

    render.print_header("Verifying Installation")
    path = prepend_path(gnubin_dirs(prefix), os.environ.get("PATH", ""))
    vlog(f"Verification PATH: {path}", verbose)
    verification = verify_tools(
        VERIFY_CHECKS,
        path_runner(path, timeout=config.preferences.verify_timeout_seconds),
        on_result=_report_check,
        verbose=verbose,
    )
    print()
    if verification.ok:
        render.print_success("All tools verified successfully!")
    else:
        render.print_error("Some tools failed verification")

    fresh_shell = None
    if options.fresh_shell_check:
        render.print_header("Testing in Fresh Shell")
        render.print_info("Testing commands in a new bash session...")
        fresh_shell = verify_tools(
            FRESH_SHELL_CHECKS,
            login_shell_runner(),
            on_result=_report_fresh_shell,
            verbose=verbose,
        )
        print()

    return SetupOutcome(
        environment=env,
        brew_prefix=prefix,
        install=install,
        config_updates=tuple(updates),
        shell_changes=tuple(shell_changes),
        verification=verification,
        fresh_shell=fresh_shell,
    )
