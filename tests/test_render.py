"""Tests for terminal output."""

from unittest.mock import patch

from gnu_setup import render
from gnu_setup.environment import Environment
from gnu_setup.installer import BulkInstallResult, InstallResult
from gnu_setup.shell_config import ConfigUpdate
from gnu_setup.tools import PACKAGE_MAP, VERIFY_CHECKS
from gnu_setup.verify import FAIL, PASS, CheckResult, VerificationReport
from gnu_setup.workflow import SetupOutcome


ENV = Environment(os_type="darwin", machine="arm64")


def _outcome(install_ok=True, verify_ok=True, config_ok=True):
    results = [InstallResult(package=PACKAGE_MAP["gnu-sed"], success=True)]
    if not install_ok:
        results.append(InstallResult(package=PACKAGE_MAP["wget"], success=False, error_message="boom"))
    checks = [CheckResult(check=VERIFY_CHECKS[0], status=PASS)]
    if not verify_ok:
        checks.append(CheckResult(check=VERIFY_CHECKS[2], status=FAIL))
    updates = [ConfigUpdate(path="/h/.bashrc", label=".bashrc (bash)", appended=True)]
    if not config_ok:
        updates.append(ConfigUpdate(path="/h/.profile", label=".profile", error_message="denied"))
    return SetupOutcome(
        environment=ENV,
        brew_prefix="/opt/homebrew",
        install=BulkInstallResult(results=tuple(results)),
        config_updates=tuple(updates),
        verification=VerificationReport(results=tuple(checks)),
    )


class TestColorize:
    """Test colorize()."""

    def test_disabled(self):
        """Plain text when colors are off."""
        with patch("gnu_setup.render.USE_COLOR", False):
            assert render.colorize("hi", render.RED) == "hi"

    def test_enabled(self):
        """Text is wrapped in the color and reset codes."""
        with patch("gnu_setup.render.USE_COLOR", True):
            assert render.colorize("hi", render.RED) == f"{render.RED}hi{render.RESET}"


class TestMessages:
    """Test the message helpers."""

    @patch("gnu_setup.render.USE_COLOR", False)
    def test_symbols(self, capsys):
        """Each helper uses its symbol."""
        render.print_success("a")
        render.print_warning("b")
        render.print_error("c")
        render.print_info("d")
        assert capsys.readouterr().out.splitlines() == ["✓ a", "⚠ b", "✗ c", "  d"]

    @patch("gnu_setup.render.USE_COLOR", False)
    def test_header(self, capsys):
        """Headers are framed by rules."""
        render.print_header("Title")
        assert capsys.readouterr().out.splitlines() == [render.RULE, "Title", render.RULE]


class TestPrintSummary:
    """Test print_summary()."""

    @patch("gnu_setup.render.USE_COLOR", False)
    def test_success(self, capsys):
        """A clean run reports success and the restart hint."""
        render.print_summary(_outcome())
        out = capsys.readouterr().out
        assert "Installation Complete!" in out
        assert "All GNU tools installed and configured" in out
        assert "exec $SHELL" in out
        assert "sed --version" in out

    @patch("gnu_setup.render.USE_COLOR", False)
    def test_failures_listed(self, capsys):
        """Every kind of failure is listed."""
        render.print_summary(_outcome(install_ok=False, verify_ok=False, config_ok=False))
        out = capsys.readouterr().out
        assert "All GNU tools installed" not in out
        assert "failed to install: wget" in out
        assert "Verification failed for: tar" in out
        assert "1 shell config file(s) could not be updated" in out
        assert "exec $SHELL" in out


class TestToolList:
    """Test print_tool_list()."""

    def test_lists_tools(self, capsys):
        """The installed tool list is printed."""
        render.print_tool_list()
        out = capsys.readouterr().out
        assert "Installed tools:" in out
        assert "ripgrep" in out
