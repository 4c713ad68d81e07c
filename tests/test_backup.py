"""Tests for file backups and the nightly backup task."""

import json
from datetime import datetime, timezone

from shoppinglist.tasks import backup as backup_task
from shoppinglist.transfer import export_all_data, prune_backups, read_document, write_backup
from shoppinglist.transfer.backup import BACKUP_PREFIX, export_filename


class TestBackupFiles:
    """Tests for writing, reading and pruning backup files."""

    def test_export_filename(self):
        """Test that names carry the prefix and a sortable timestamp."""
        name = export_filename(datetime(2026, 2, 10, 3, 0, 5, tzinfo=timezone.utc))
        assert name == "shopping-list-data-export-2026-02-10T03-00-05.json"

    def test_write_and_read(self, tmp_path, seeded_session):
        """Test that a written backup reads back as the same document."""
        export = export_all_data(seeded_session)

        path = write_backup(export, tmp_path / "nested")

        assert path.exists()
        assert path.name.startswith(BACKUP_PREFIX)
        assert read_document(path) == json.loads(json.dumps(export.to_document()))

    def test_prune_keeps_newest(self, tmp_path):
        """Test that only the newest backups survive."""
        names = [
            f"{BACKUP_PREFIX}2026-02-0{day}T03-00-00.json" for day in range(1, 6)
        ]
        for name in names:
            (tmp_path / name).write_text("{}")
        (tmp_path / "notes.txt").write_text("keep me")

        removed = prune_backups(tmp_path, keep=2)

        assert [p.name for p in removed] == names[:3]
        remaining = sorted(p.name for p in tmp_path.iterdir())
        assert remaining == sorted([*names[3:], "notes.txt"])

    def test_prune_with_fewer_files(self, tmp_path):
        """Test that nothing is removed when under the retention count."""
        (tmp_path / f"{BACKUP_PREFIX}2026-02-01T03-00-00.json").write_text("{}")

        assert prune_backups(tmp_path, keep=5) == []


class TestRunBackup:
    """Tests for the backup job body."""

    def test_run_backup(self, tmp_path, seeded_session, monkeypatch):
        """Test that the job exports, writes and prunes."""
        monkeypatch.setattr(
            backup_task, "export_all_data", lambda: export_all_data(seeded_session)
        )
        stale = tmp_path / f"{BACKUP_PREFIX}2020-01-01T00-00-00.json"
        stale.write_text("{}")

        result = backup_task.run_backup(str(tmp_path), keep=1)

        assert result["status"] == "completed"
        assert result["total_plans"] == 2
        assert result["total_items"] == 6
        assert result["removed"] == [stale.name]
        assert not stale.exists()
        assert read_document(result["path"])["version"] == "1.0.0"
