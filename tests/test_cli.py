"""
Tests for the regsweep command line through click's CliRunner.
"""

import json
import time

import pytest
from click.testing import CliRunner

from regsweep.cli import cli
from regsweep.exit_codes import CONFIG_ERROR, DATA_ERROR, IO_ERROR, USAGE_ERROR

DAY = 86400


def stdout_lines(result, prefixes):
    return [line for line in result.stdout.splitlines() if line[:1] in prefixes]


def error_object(result):
    lines = stdout_lines(result, "{")
    assert lines, result.output
    return json.loads(lines[-1])


@pytest.fixture
def store(builder):
    now = int(time.time())
    builder.tag("library/ubuntu", "latest", ["A", "B", "C"], now - DAY)
    builder.tag("library/ubuntu", "old", ["D", "B"], now - 25 * DAY)
    return builder


@pytest.fixture
def runner():
    return CliRunner()


class TestSweepCommand:
    """Tests for 'regsweep sweep'."""

    def test_pretend_report(self, runner, store):
        result = runner.invoke(cli, ['sweep', str(store.root)])

        assert result.exit_code == 0, result.output
        lines = stdout_lines(result, "+-")
        assert len(lines) == 2
        assert lines[0].startswith("+ library/ubuntu:latest ")
        assert lines[1].startswith("- library/ubuntu:old ")
        assert lines[0].endswith(" UTC")
        assert store.has_image("D")

    def test_shorter_window(self, runner, store):
        result = runner.invoke(cli, ['sweep', str(store.root), '--older-than', '12h'])

        assert result.exit_code == 0, result.output
        assert [line[0] for line in stdout_lines(result, "+-")] == ["-", "-"]

    def test_delete(self, runner, store):
        result = runner.invoke(cli, ['sweep', str(store.root), '--delete'])

        assert result.exit_code == 0, result.output
        assert stdout_lines(result, "+-") == []
        assert not store.has_image("D")
        for image_id in "ABC":
            assert store.has_image(image_id)

    def test_jsonl_format(self, runner, store):
        result = runner.invoke(cli, ['sweep', str(store.root), '-f', 'jsonl'])

        assert result.exit_code == 0, result.output
        records = [json.loads(line) for line in stdout_lines(result, "{")]
        assert [(r['tag'], r['status']) for r in records] == [
            ("library/ubuntu:latest", "keep"),
            ("library/ubuntu:old", "delete"),
        ]
        assert records[1]['images_to_delete'] == ["D"]

    def test_csv_format(self, runner, store):
        result = runner.invoke(cli, ['sweep', str(store.root), '-f', 'csv'])

        assert result.exit_code == 0, result.output
        header = result.stdout.splitlines()[0]
        assert "status" in header.split(",")
        assert "tag" in header.split(",")

    def test_table_format(self, runner, store):
        result = runner.invoke(cli, ['sweep', str(store.root), '-f', 'table'])
        assert result.exit_code == 0, result.output

    def test_quiet(self, runner, store):
        result = runner.invoke(cli, ['sweep', str(store.root), '-q'])
        assert result.exit_code == 0
        assert stdout_lines(result, "+-{") == []

    def test_format_from_env(self, runner, store, monkeypatch):
        monkeypatch.setenv('REGSWEEP_FORMAT', 'json')
        result = runner.invoke(cli, ['sweep', str(store.root)])

        assert result.exit_code == 0, result.output
        records = json.loads(result.stdout)
        assert len(records) == 2

    def test_store_root_from_config(self, runner, store, monkeypatch):
        monkeypatch.setenv('REGSWEEP_STORE_ROOT', str(store.root))
        result = runner.invoke(cli, ['sweep'])

        assert result.exit_code == 0, result.output
        assert len(stdout_lines(result, "+-")) == 2

    def test_pretend_false_in_config(self, runner, store, monkeypatch):
        monkeypatch.setenv('REGSWEEP_SWEEP_PRETEND', 'false')
        result = runner.invoke(cli, ['sweep', str(store.root)])

        assert result.exit_code == 0, result.output
        assert not store.has_image("D")

    def test_pretend_flag_beats_config(self, runner, store, monkeypatch):
        monkeypatch.setenv('REGSWEEP_SWEEP_PRETEND', 'false')
        result = runner.invoke(cli, ['sweep', str(store.root), '--pretend'])

        assert result.exit_code == 0, result.output
        assert store.has_image("D")


class TestSweepErrors:
    """Tests for exit codes and error output."""

    def test_missing_store_root(self, runner):
        result = runner.invoke(cli, ['sweep'])
        assert result.exit_code == USAGE_ERROR
        assert error_object(result)['type'] == 'MissingStoreRootError'

    def test_missing_store(self, runner, tmp_path):
        result = runner.invoke(cli, ['sweep', str(tmp_path / 'nowhere')])
        assert result.exit_code == DATA_ERROR
        assert error_object(result)['type'] == 'StoreNotFoundError'

    def test_corrupt_store(self, runner, store):
        (store.repo_dir("library/ubuntu") / "taglatest_json").write_text("{")
        result = runner.invoke(cli, ['sweep', str(store.root), '--delete'])

        assert result.exit_code == DATA_ERROR
        obj = error_object(result)
        assert obj['type'] == 'StoreCorruptError'
        assert obj['path'].endswith("taglatest_json")
        assert store.has_image("D")

    def test_unrepresentable_timestamp(self, runner, store):
        store.tag("library/app", "far", ["Z"], 1e20)
        result = runner.invoke(cli, ['sweep', str(store.root), '--delete', '-f', 'json'])

        assert result.exit_code == DATA_ERROR
        assert error_object(result)['type'] == 'StoreCorruptError'
        assert store.has_image("D")

    def test_bad_retention(self, runner, store):
        result = runner.invoke(cli, ['sweep', str(store.root), '--older-than', 'forever'])
        assert result.exit_code == USAGE_ERROR
        assert error_object(result)['type'] == 'RetentionParseError'

    def test_delete_failure(self, runner, store, monkeypatch):
        def refuse(path, *args, **kwargs):
            raise PermissionError(f"denied: {path}")

        monkeypatch.setattr("regsweep.infra.registry_store.shutil.rmtree", refuse)
        result = runner.invoke(cli, ['sweep', str(store.root), '--delete'])

        assert result.exit_code == IO_ERROR
        obj = error_object(result)
        assert obj['type'] == 'DeleteError'
        assert obj['image'] == 'D'
        assert obj['deleted'] == []

    def test_bad_config(self, runner, store, isolated_env):
        config_dir = isolated_env / '.regsweep'
        config_dir.mkdir()
        (config_dir / 'config.json').write_text("{")

        result = runner.invoke(cli, ['sweep', str(store.root)])

        assert result.exit_code == CONFIG_ERROR


class TestConfigCommand:
    """Tests for 'regsweep config show'."""

    def test_show(self, runner):
        result = runner.invoke(cli, ['config', 'show'])
        assert result.exit_code == 0
        config = json.loads(result.stdout)
        assert config['retention']['older_than'] == '20d'

    def test_show_pretty(self, runner):
        result = runner.invoke(cli, ['config', 'show', '--pretty'])
        assert result.exit_code == 0
        assert json.loads(result.stdout)['sweep']['pretend'] is True

    def test_show_path(self, runner, isolated_env):
        result = runner.invoke(cli, ['config', 'show', '--path'])
        assert result.exit_code == 0
        assert json.loads(result.stdout)['config_path'] == str(isolated_env / '.regsweep' / 'config.json')
