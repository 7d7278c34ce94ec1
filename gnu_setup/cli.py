"""
Command-line entry point.

Usage:
    gnu-tools-setup              # Interactive setup
    gnu-tools-setup --yes        # Skip the confirmation prompt
    gnu-tools-setup -v --log-file ~/gnu-setup.log
"""

from __future__ import annotations

import argparse
import sys

from . import __version__, render
from .common import SetupError, is_truthy_env
from .config import load_config, validate_config
from .logging_config import get_logger, setup_logging
from .workflow import SetupOptions, run_setup


EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CANCELLED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gnu-tools-setup",
        description="Install GNU tools with Homebrew and make them the default on macOS.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-y", "--yes", action="store_true",
                        help="Do not wait for confirmation before starting")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose diagnostics")
    parser.add_argument("-q", "--quiet", action="store_true", help="No diagnostic output on the console")
    parser.add_argument("--log-file", help="Also write diagnostics to this file")
    parser.add_argument("--config", help="Configuration file (YAML or JSON)")
    parser.add_argument("--skip", action="append", default=[], metavar="PACKAGE",
                        help="Do not install this Homebrew formula (repeatable)")
    parser.add_argument("--no-fresh-shell", action="store_true",
                        help="Skip the check inside a new login shell")
    parser.add_argument("--register-shell", action="store_true",
                        help="Add Homebrew bash to /etc/shells (uses sudo)")
    parser.add_argument("--change-shell", action="store_true",
                        help="Make Homebrew bash the default login shell (uses chsh)")
    return parser


def confirm_start() -> bool:
    """
    Wait for ENTER before touching the system.

    Returns:
        True to proceed, False when input is closed
    """
    print("Press ENTER to continue or Ctrl+C to cancel...")
    try:
        input()
    except EOFError:
        return False
    return True


def main(argv: list[str] | None = None) -> int:
    """
    Run the setup.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)
    try:
        setup_logging(verbose=args.verbose, quiet=args.quiet, log_file=args.log_file)
    except OSError as e:
        render.print_error(f"Cannot open log file {args.log_file}: {e}")
        return EXIT_FAILURE
    logger = get_logger()

    try:
        config = load_config(custom_path=args.config, verbose=args.verbose)
    except ValueError as e:
        render.print_error(str(e))
        return EXIT_FAILURE

    for warning in validate_config(config):
        logger.warning(warning)

    options = SetupOptions.from_config(config, verbose=args.verbose)
    options.extra_skip = list(args.skip)
    if args.no_fresh_shell:
        options.fresh_shell_check = False
    if args.register_shell:
        options.register_login_shell = True
    if args.change_shell:
        options.change_default_shell = True

    try:
        render.clear_screen()
        render.print_header("GNU Tools Setup for macOS")
        print()
        if not (args.yes or is_truthy_env("GNU_SETUP_ASSUME_YES")):
            if not confirm_start():
                render.print_warning("No input available; pass --yes to run unattended")
                return EXIT_CANCELLED

        outcome = run_setup(config, options)
    except KeyboardInterrupt:
        print()
        render.print_warning("Cancelled")
        return EXIT_CANCELLED
    except SetupError as e:
        render.print_error(e.message)
        if e.remediation:
            render.print_info(e.remediation)
        logger.debug("Fatal setup error", exc_info=True)
        return EXIT_FAILURE

    render.print_summary(outcome)
    render.print_tool_list()
    logger.debug(f"Setup finished (ok={outcome.ok})")
    return EXIT_OK if outcome.ok else EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
