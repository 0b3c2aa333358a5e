"""
Tests for the incremental fetcher.

The local archive file is the only "already synced" signal, so these
tests work against a real temporary directory and a FakeHelm that writes
archives on pull.
"""

from __future__ import annotations

import threading
from pathlib import Path

import pytest

from chartmirror.enumerator import ChartTarget
from chartmirror.errors import ExternalCommandFailure, SyncCancelled
from chartmirror.fetcher import IncrementalFetcher, local_archives

from conftest import FakeHelm

TARGETS = [
    ChartTarget("wordpress", "19.2.2"),
    ChartTarget("wordpress", "19.2.1"),
    ChartTarget("redis", "18.0.1"),
]


class TestSequential:

    def test_fetches_missing(self, helm, workdir: Path):
        result = IncrementalFetcher(helm, workdir).fetch_all(TARGETS)

        assert result.fetched == TARGETS
        assert result.existing == []
        assert local_archives(workdir) == [
            "redis-18.0.1.tgz", "wordpress-19.2.1.tgz", "wordpress-19.2.2.tgz",
        ]

    def test_second_run_fetches_nothing(self, helm, workdir: Path):
        fetcher = IncrementalFetcher(helm, workdir)
        fetcher.fetch_all(TARGETS)
        before = local_archives(workdir)
        pulls_before = len(helm.pulls)

        second = fetcher.fetch_all(TARGETS)

        assert second.fetched == []
        assert second.existing == TARGETS
        assert len(helm.pulls) == pulls_before
        assert local_archives(workdir) == before

    def test_skips_existing_file(self, helm, workdir: Path):
        (workdir / "wordpress-19.2.2.tgz").write_bytes(b"old")

        result = IncrementalFetcher(helm, workdir).fetch_all(TARGETS)

        assert ("wordpress", "19.2.2") not in helm.pulls
        assert result.existing == [ChartTarget("wordpress", "19.2.2")]
        # Existing content is never revalidated or overwritten
        assert (workdir / "wordpress-19.2.2.tgz").read_bytes() == b"old"

    def test_duplicate_targets_pulled_once(self, helm, workdir: Path):
        IncrementalFetcher(helm, workdir).fetch_all(TARGETS + TARGETS[:1])

        assert helm.pulls.count(("wordpress", "19.2.2")) == 1

    def test_failure_stops_the_run(self, workdir: Path):
        helm = FakeHelm(fail_pull=[("wordpress", "19.2.1")])

        with pytest.raises(ExternalCommandFailure):
            IncrementalFetcher(helm, workdir).fetch_all(TARGETS)

        assert helm.pulls == [("wordpress", "19.2.2"), ("wordpress", "19.2.1")]
        assert local_archives(workdir) == ["wordpress-19.2.2.tgz"]

    def test_cancelled_before_start(self, helm, workdir: Path):
        event = threading.Event()
        event.set()

        with pytest.raises(SyncCancelled):
            IncrementalFetcher(helm, workdir, cancel_event=event).fetch_all(TARGETS)
        assert helm.pulls == []

    def test_cancel_without_pending_downloads_is_not_an_error(self, helm, workdir: Path):
        for target in TARGETS:
            (workdir / target.archive_name).write_bytes(b"x")
        event = threading.Event()
        event.set()

        result = IncrementalFetcher(helm, workdir, cancel_event=event).fetch_all(TARGETS)

        assert result.fetched == []


class TestParallel:

    def test_fetches_everything(self, helm, workdir: Path):
        result = IncrementalFetcher(helm, workdir, workers=3).fetch_all(TARGETS)

        assert sorted(result.fetched, key=lambda t: t.archive_name) == sorted(
            TARGETS, key=lambda t: t.archive_name
        )
        assert len(local_archives(workdir)) == 3

    def test_failure_propagates(self, workdir: Path):
        helm = FakeHelm(fail_pull=[("redis", "18.0.1")])

        with pytest.raises(ExternalCommandFailure):
            IncrementalFetcher(helm, workdir, workers=2).fetch_all(TARGETS)

    def test_cancel_lets_in_flight_finish(self, workdir: Path):
        event = threading.Event()
        both_started = threading.Barrier(2, timeout=5)

        class SlowHelm(FakeHelm):
            def pull(self, chart, version, destination):
                # Cancel only once two downloads are in flight
                both_started.wait()
                event.set()
                return super().pull(chart, version, destination)

        helm = SlowHelm()
        fetcher = IncrementalFetcher(helm, workdir, workers=2, cancel_event=event)

        with pytest.raises(SyncCancelled):
            fetcher.fetch_all(TARGETS)

        # Both in-flight downloads completed, the third was never started
        assert len(helm.pulls) == 2
        assert len(local_archives(workdir)) == 2
