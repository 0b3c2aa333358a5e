"""
Tests for sync mode resolution.

resolve_mode() must reject every malformed combination before any
external call is made, so these tests need no collaborators at all.
"""

from __future__ import annotations

import pytest

from chartmirror.errors import UsageError
from chartmirror.modes import AllCharts, LatestCharts, SpecificChart, resolve_mode


class TestDefaults:

    def test_no_options_is_all(self):
        assert resolve_mode() == AllCharts()

    def test_empty_order_is_all(self):
        assert resolve_mode(order=[]) == AllCharts()

    def test_all_flag(self):
        assert resolve_mode(all_charts=True) == AllCharts()


class TestLatest:

    def test_numeric_count(self):
        mode = resolve_mode(latest="5")
        assert mode == LatestCharts(5)
        assert mode.name == "latest"

    def test_zero_is_allowed(self):
        assert resolve_mode(latest="0") == LatestCharts(0)

    @pytest.mark.parametrize("raw", ["abc", "-1", "1.5", "", " 5"])
    def test_non_numeric_rejected(self, raw):
        with pytest.raises(UsageError, match="--latest requires a number"):
            resolve_mode(latest=raw)


class TestSpecific:

    def test_chart_and_version(self):
        mode = resolve_mode(chart="wordpress", version="19.2.2", order=["chart", "version"])
        assert mode == SpecificChart("wordpress", "19.2.2")
        assert "wordpress" in mode.describe()

    def test_version_without_chart(self):
        with pytest.raises(UsageError, match="--version can only be used with --chart"):
            resolve_mode(version="1.0.0")

    def test_version_before_chart(self):
        """--version must follow --chart on the command line."""
        with pytest.raises(UsageError, match="--version can only be used with --chart"):
            resolve_mode(chart="wordpress", version="1.0.0", order=["version", "chart"])

    def test_version_without_chart_wins_over_other_flags(self):
        with pytest.raises(UsageError, match="--version can only be used with --chart"):
            resolve_mode(all_charts=True, version="1.0.0", order=["all", "version"])

    def test_chart_without_version(self):
        with pytest.raises(UsageError, match="--version is required when using --chart"):
            resolve_mode(chart="wordpress")

    def test_empty_chart_name(self):
        with pytest.raises(UsageError, match="--chart requires a name"):
            resolve_mode(chart="", version="1.0.0", order=["chart", "version"])

    def test_empty_version(self):
        with pytest.raises(UsageError, match="--version requires a version number"):
            resolve_mode(chart="wordpress", version="", order=["chart", "version"])


class TestExclusivity:

    def test_all_and_latest(self):
        with pytest.raises(UsageError, match="cannot be combined"):
            resolve_mode(all_charts=True, latest="3")

    def test_latest_and_chart(self):
        with pytest.raises(UsageError, match="cannot be combined"):
            resolve_mode(latest="3", chart="redis", version="1", order=["latest", "chart", "version"])

    def test_all_and_chart(self):
        with pytest.raises(UsageError, match="cannot be combined"):
            resolve_mode(all_charts=True, chart="redis", version="1", order=["chart", "version", "all"])
