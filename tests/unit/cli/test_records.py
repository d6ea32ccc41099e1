"""Unit tests for the records commands."""

from pathlib import Path

from spacewarden.cli.main import app
from spacewarden.core.config import WardenConfig
from spacewarden.storage.records import JsonlRecordStore
from typer.testing import CliRunner

runner = CliRunner()


class TestRecordsCommands:
    """Tests for spacewarden records add/list/remove."""

    def test_add_with_id(
        self, config_file: Path, warden_config: WardenConfig, tmp_path: Path
    ) -> None:
        target = tmp_path / "a.bin"

        result = runner.invoke(
            app, ["--config", str(config_file), "records", "add", str(target), "--id", "rec1"]
        )

        assert result.exit_code == 0
        records = JsonlRecordStore(warden_config.records_path).query_all()
        assert [(r.id, r.path) for r in records] == [("rec1", str(target))]

    def test_list_empty(self, config_file: Path) -> None:
        result = runner.invoke(app, ["--config", str(config_file), "records", "list"])

        assert result.exit_code == 0
        assert "No tracked records" in result.output

    def test_list_records(self, config_file: Path, warden_config: WardenConfig) -> None:
        JsonlRecordStore(warden_config.records_path).add("/nowhere/a.bin", record_id="rec1")

        result = runner.invoke(app, ["--config", str(config_file), "records", "list"])

        assert result.exit_code == 0
        assert "Tracked Records" in result.output
        assert "rec1" in result.output

    def test_remove(self, config_file: Path, warden_config: WardenConfig) -> None:
        store = JsonlRecordStore(warden_config.records_path)
        store.add("/nowhere/a.bin", record_id="rec1")

        result = runner.invoke(app, ["--config", str(config_file), "records", "remove", "rec1"])

        assert result.exit_code == 0
        assert "Removed record rec1" in result.output
        assert store.query_all() == []

    def test_remove_unknown(self, config_file: Path) -> None:
        result = runner.invoke(app, ["--config", str(config_file), "records", "remove", "nope"])

        assert result.exit_code == 1
        assert "No record with id nope" in result.output
