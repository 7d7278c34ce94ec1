"""
GNU Tools Setup - install GNU command-line tools on macOS and put them first on PATH.

Core Modules:
- Foundation: Environment check, configuration, logging
- Homebrew: Detection, bootstrap, package queries
- Installation: Best-effort package installation
- Shell: Idempotent startup file edits, login shell registration
- Verification: Version checks against the adjusted PATH and a fresh login shell
"""

__version__ = "1.0.0"
__author__ = "GNU Tools Setup Contributors"

VERSION = __version__

# Foundation
from .common import SetupError, prepend_path
from .environment import Environment, UnsupportedPlatformError, check_macos, detect_environment
from .config import (
    Config,
    Preferences,
    ShellPreferences,
    load_config,
    load_config_file,
    validate_config,
)
from .tools import (
    GnuPackage,
    ToolCheck,
    PACKAGES,
    VERIFY_CHECKS,
    FRESH_SHELL_CHECKS,
    get_package,
    select_packages,
    gnubin_dirs,
)

# Installation
from .installer import (
    Step,
    StepResult,
    InstallResult,
    BulkInstallResult,
    execute_step,
    install_package,
    install_packages,
)
from .package_managers import (
    Homebrew,
    HomebrewBootstrapError,
    find_brew,
    ensure_homebrew,
)

# Shell configuration
from .shell_config import (
    PATH_MARKER,
    ConfigUpdate,
    ensure_block,
    render_path_block,
    update_shell_configs,
)
from .shells import (
    ShellChange,
    is_login_shell,
    register_login_shell,
    change_default_shell,
)

# Verification
from .verify import (
    CheckResult,
    VerificationReport,
    evaluate,
    verify_tools,
)

# Pipeline
from .workflow import SetupOptions, SetupOutcome, run_setup

# Logging configuration
from .logging_config import (
    setup_logging,
    get_logger,
)

__all__ = [
    # Version
    "__version__",
    "VERSION",
    # Foundation
    "SetupError",
    "prepend_path",
    "Environment",
    "UnsupportedPlatformError",
    "check_macos",
    "detect_environment",
    "Config",
    "Preferences",
    "ShellPreferences",
    "load_config",
    "load_config_file",
    "validate_config",
    "GnuPackage",
    "ToolCheck",
    "PACKAGES",
    "VERIFY_CHECKS",
    "FRESH_SHELL_CHECKS",
    "get_package",
    "select_packages",
    "gnubin_dirs",
    # Installation
    "Step",
    "StepResult",
    "InstallResult",
    "BulkInstallResult",
    "execute_step",
    "install_package",
    "install_packages",
    "Homebrew",
    "HomebrewBootstrapError",
    "find_brew",
    "ensure_homebrew",
    # Shell configuration
    "PATH_MARKER",
    "ConfigUpdate",
    "ensure_block",
    "render_path_block",
    "update_shell_configs",
    "ShellChange",
    "is_login_shell",
    "register_login_shell",
    "change_default_shell",
    # Verification
    "CheckResult",
    "VerificationReport",
    "evaluate",
    "verify_tools",
    # Pipeline
    "SetupOptions",
    "SetupOutcome",
    "run_setup",
    # Logging
    "setup_logging",
    "get_logger",
]
