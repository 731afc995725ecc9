"""Tests for the sweep executor."""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from regsweep.errors import DeleteError
from regsweep.infra import RegistryStore
from regsweep.services import SweepExecutor, build_plan

from conftest import DAY, NOW, make_tag


def run(executor, plan, pretend):
    messages = list(executor.execute(plan, pretend=pretend))
    return executor.last_report, messages


@pytest.fixture
def scenario_a():
    t1 = make_tag("T1", ["A", "B", "C"], NOW - DAY)
    t2 = make_tag("T2", ["D", "B"], NOW - 25 * DAY)
    return build_plan([t1, t2], timedelta(days=20), now=NOW)


class TestPretend:
    """Tests for pretend (dry-run) mode."""

    def test_no_store_mutation(self, scenario_a):
        store = MagicMock(spec=RegistryStore)
        report, _ = run(SweepExecutor(store), scenario_a, pretend=True)

        store.delete_image.assert_not_called()
        assert report.pretend is True
        assert report.deleted_images == []

    def test_partition_matches_plan(self, scenario_a):
        report, _ = run(SweepExecutor(MagicMock()), scenario_a, pretend=True)

        assert [e.ref for e in report.kept] == ["library/app:T1"]
        assert [e.ref for e in report.removed] == ["library/app:T2"]
        assert report.removed[0].images == ["D"]

    def test_entries_ordered_by_last_update(self):
        tags = [
            make_tag("newer", ["a"], NOW - 30 * DAY),
            make_tag("older", ["b"], NOW - 40 * DAY),
        ]
        plan = build_plan(tags, timedelta(days=1), now=NOW)
        report, _ = run(SweepExecutor(MagicMock()), plan, pretend=True)

        assert [e.tag.name for e in report.removed] == ["older", "newer"]

    def test_records(self, scenario_a):
        report, _ = run(SweepExecutor(MagicMock()), scenario_a, pretend=True)
        records = report.records()

        assert [(r['tag'], r['status']) for r in records] == [
            ("library/app:T1", "keep"),
            ("library/app:T2", "delete"),
        ]
        assert records[1]['images_to_delete'] == ["D"]
        assert records[0]['last_update_time'].endswith("+00:00")


class TestLiveDeletion:
    """Tests for live mode."""

    def test_deletes_only_marked_images(self, builder):
        builder.tag("library/app", "T1", ["A", "B", "C"], NOW - DAY)
        builder.tag("library/app", "T2", ["D", "B"], NOW - 25 * DAY)
        store = RegistryStore(builder.root)
        t1 = make_tag("T1", ["A", "B", "C"], NOW - DAY)
        t2 = make_tag("T2", ["D", "B"], NOW - 25 * DAY)
        plan = build_plan([t1, t2], timedelta(days=20), now=NOW)

        report, messages = run(SweepExecutor(store), plan, pretend=False)

        assert report.deleted_images == ["D"]
        assert not builder.has_image("D")
        for image_id in ("A", "B", "C"):
            assert builder.has_image(image_id)
        assert messages == ["Deleted D (library/app:T2)"]

    def test_shared_stale_image_deleted_once(self):
        t4 = make_tag("T4", ["X", "Y"], 0)
        t5 = make_tag("T5", ["X", "Z"], 0)
        plan = build_plan([t4, t5], timedelta(days=1), now=NOW)
        store = MagicMock()
        store.delete_image.return_value = True

        report, _ = run(SweepExecutor(store), plan, pretend=False)

        deleted = [c.args[0] for c in store.delete_image.call_args_list]
        assert sorted(deleted) == ["X", "Y", "Z"]
        assert report.deleted_images == deleted

    def test_already_absent_image_is_not_an_error(self, builder):
        plan = build_plan([make_tag("old", ["gone"], 0)], timedelta(days=1), now=NOW)

        report, messages = run(SweepExecutor(RegistryStore(builder.root)), plan, pretend=False)

        assert report.deleted_images == ["gone"]
        assert messages == ["Already absent gone (library/app:old)"]

    def test_fail_fast(self):
        plan = build_plan(
            [make_tag("a", ["1", "2", "3"], 0)], timedelta(days=1), now=NOW
        )
        store = MagicMock()
        store.delete_image.side_effect = [True, PermissionError("denied"), True]

        executor = SweepExecutor(store)
        with pytest.raises(DeleteError) as exc_info:
            list(executor.execute(plan, pretend=False))

        error = exc_info.value
        assert error.image_id == "2"
        assert error.deleted == ["1"]
        assert isinstance(error.cause, PermissionError)
        assert store.delete_image.call_count == 2
        assert executor.last_report.deleted_images == ["1"]
