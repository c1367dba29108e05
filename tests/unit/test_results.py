"""Unit tests for outcome classification."""

import pytest

from iptctl.core.executor import CommandResult
from iptctl.core.exceptions import ExecutionError, NonZeroExitError
from iptctl.services.results import listing_contains, to_exists, to_lines, to_result


def _outcome(code=0, stdout="", stderr=""):
    return CommandResult(["iptables", "-S"], code, stdout, stderr)


class TestToResult:
    """Tests for to_result."""

    def test_success_returns_none(self):
        assert to_result(_outcome()) is None

    def test_failure_carries_code_and_stderr(self):
        stderr = "iptables: No chain/target/match by that name.\n"
        with pytest.raises(NonZeroExitError) as exc:
            to_result(_outcome(1, stderr=stderr))

        assert exc.value.code == 1
        assert exc.value.stderr == stderr
        assert str(exc.value) == "code: 1, msg: iptables: No chain/target/match by that name."
        assert exc.value.command == "iptables -S"

    def test_signal_kill_reports_minus_one(self):
        with pytest.raises(NonZeroExitError) as exc:
            to_result(CommandResult(["iptables"], -1, "", "", signal=9))
        assert exc.value.code == -1

    def test_is_execution_error(self):
        with pytest.raises(ExecutionError) as exc:
            to_result(_outcome(4, stderr="Another app is currently holding the xtables lock"))
        assert exc.value.exit_code == 5


class TestToExists:
    """Predicates never raise on a non-zero exit."""

    @pytest.mark.parametrize("code, expected", [(0, True), (1, False), (2, False), (-1, False)])
    def test_exit_code_mapping(self, code, expected):
        assert to_exists(_outcome(code, stderr="whatever")) is expected


class TestToLines:
    """Tests for to_lines."""

    def test_splits_on_newline(self):
        out = "-P INPUT ACCEPT\n-A INPUT -j DROP\n"
        assert to_lines(_outcome(stdout=out)) == ["-P INPUT ACCEPT", "-A INPUT -j DROP"]

    def test_surrounding_blank_lines_dropped(self):
        assert to_lines(_outcome(stdout="\n\n-N FOO\n\n")) == ["-N FOO"]

    def test_empty_output(self):
        assert to_lines(_outcome(stdout="")) == []
        assert to_lines(_outcome(stdout="\n")) == []

    def test_failure_raises(self):
        with pytest.raises(NonZeroExitError):
            to_lines(_outcome(1, stdout="-P INPUT ACCEPT\n", stderr="boom"))


class TestListingContains:
    """Fallback existence check against ``-S`` output."""

    LISTING = (
        "-P INPUT ACCEPT\n"
        "-A INPUT -p tcp -m tcp --dport 22 -j ACCEPT\n"
        "-A INPUT -m comment --comment \"allow web\" -j ACCEPT\n"
    )

    def test_present(self):
        tokens = ["-p", "tcp", "-m", "tcp", "--dport", "22", "-j", "ACCEPT"]
        assert listing_contains(_outcome(stdout=self.LISTING), "INPUT", tokens) is True

    def test_absent(self):
        tokens = ["-p", "udp", "-j", "ACCEPT"]
        assert listing_contains(_outcome(stdout=self.LISTING), "INPUT", tokens) is False

    def test_wrong_chain(self):
        tokens = ["-p", "tcp", "-m", "tcp", "--dport", "22", "-j", "ACCEPT"]
        assert listing_contains(_outcome(stdout=self.LISTING), "OUTPUT", tokens) is False

    def test_unnormalized_form_not_found(self):
        """Matching is literal; iptables adds ``-m tcp`` when printing."""
        tokens = ["-p", "tcp", "--dport", "22", "-j", "ACCEPT"]
        assert listing_contains(_outcome(stdout=self.LISTING), "INPUT", tokens) is False

    def test_failed_listing_is_false(self):
        outcome = _outcome(1, stdout=self.LISTING, stderr="table does not exist")
        assert listing_contains(outcome, "INPUT", ["-p", "tcp"]) is False
