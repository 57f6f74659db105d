"""
Tests for the backup service functions.

Tests cover:
1. End-to-end backup of a directory's contents
2. Failure paths and what they leave on disk
3. Timestamp collisions and retention
4. Listing, deleting and restoring backups
"""
import os
import tarfile
from datetime import datetime
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from conftest import relative_entries
from dirbackup.exceptions import ArchiveFailed, DestinationNotFound, DestinationUnwritable, SourceNotFound
from dirbackup.models import BackupStatus
from dirbackup.services import create_backup, delete_backup, list_backups, restore_from_backup


class TestCreateBackup:
    def test_round_trip_has_no_enclosing_directory(self, source_tree, destination, tmp_path, extract):
        artifact = create_backup(str(source_tree), str(destination))

        archives = list(destination.glob("backup_*.tar.gz"))
        assert archives == [artifact.file_path]
        assert artifact.status is BackupStatus.SUCCESS
        assert artifact.size == artifact.file_path.stat().st_size

        extracted = extract(artifact.file_path, tmp_path / "extracted")
        assert relative_entries(extracted) == ["a.txt", "b", "b/c.txt"]
        assert (extracted / "a.txt").read_text() == "hello"
        assert (extracted / "b" / "c.txt").read_text() == "world"
        assert not (extracted / source_tree.name).exists()

    def test_file_name_uses_invocation_time(self, source_tree, destination):
        with patch("dirbackup.utils.datetime") as mock_dt:
            mock_dt.now.return_value = datetime(2026, 1, 30, 10, 5, 9)
            mock_dt.strptime = datetime.strptime
            artifact = create_backup(str(source_tree), str(destination))

        assert artifact.file_path == destination / "backup_20260130_100509.tar.gz"
        assert artifact.created_at == datetime(2026, 1, 30, 10, 5, 9)

    def test_missing_destination_is_created(self, source_tree, tmp_path):
        destination = tmp_path / "deep" / "er" / "backups"

        artifact = create_backup(str(source_tree), str(destination))

        assert destination.is_dir()
        assert artifact.file_path.parent == destination

    def test_entries_listed_in_write_order(self, source_tree, destination):
        artifact = create_backup(str(source_tree), str(destination))

        assert artifact.entries == ["a.txt", "b", "b/c.txt"]

    def test_artifact_is_immutable(self, source_tree, destination):
        artifact = create_backup(str(source_tree), str(destination))

        with pytest.raises(ValidationError):
            artifact.status = BackupStatus.FAILURE


class TestCreateBackupFailures:
    def test_missing_source_creates_no_archive(self, tmp_path, destination):
        with pytest.raises(SourceNotFound):
            create_backup(str(tmp_path / "missing"), str(destination))

        assert not destination.exists()

    def test_unwritable_destination(self, source_tree, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")

        with pytest.raises(DestinationUnwritable):
            create_backup(str(source_tree), str(blocker / "backups"))

    def test_archive_error_keeps_partial_file(self, source_tree, destination):
        with patch.object(tarfile.TarFile, "add", side_effect=OSError(28, "No space left on device")):
            with pytest.raises(ArchiveFailed) as exc_info:
                create_backup(str(source_tree), str(destination))

        artifact = exc_info.value.artifact
        assert artifact.status is BackupStatus.FAILURE
        assert artifact.file_path.exists()
        assert artifact.entries == []

    def test_verification_failure_is_archive_failure(self, source_tree, destination):
        with patch(
            "dirbackup.backup_source.directory.DirectoryBackupManager.verify_backup",
            side_effect=ArchiveFailed("Archive verification failed: bad crc"),
        ):
            with pytest.raises(ArchiveFailed) as exc_info:
                create_backup(str(source_tree), str(destination))

        assert exc_info.value.artifact.status is BackupStatus.FAILURE

    def test_verification_can_be_skipped(self, source_tree, destination):
        with patch("dirbackup.backup_source.directory.DirectoryBackupManager.verify_backup") as verify:
            create_backup(str(source_tree), str(destination), verify=False)

        verify.assert_not_called()


class TestRepeatedBackups:
    def test_same_second_overwrites(self, source_tree, destination, tmp_path, extract):
        with patch("dirbackup.services.backup.make_timestamp", return_value="20260130_100000"):
            create_backup(str(source_tree), str(destination))
            (source_tree / "a.txt").write_text("changed")
            artifact = create_backup(str(source_tree), str(destination))

        assert list(destination.iterdir()) == [artifact.file_path]
        extracted = extract(artifact.file_path, tmp_path / "extracted")
        assert (extracted / "a.txt").read_text() == "changed"

    def test_different_seconds_give_distinct_artifacts(self, source_tree, destination):
        with patch(
            "dirbackup.services.backup.make_timestamp",
            side_effect=["20260130_100000", "20260130_100001"],
        ):
            first = create_backup(str(source_tree), str(destination))
            second = create_backup(str(source_tree), str(destination))

        assert first.file_path != second.file_path
        assert len(list(destination.glob("backup_*.tar.gz"))) == 2

    def test_retention_keeps_newest(self, source_tree, destination):
        stamps = ["20260130_100000", "20260130_100001", "20260130_100002"]
        with patch("dirbackup.services.backup.make_timestamp", side_effect=stamps):
            for _ in stamps:
                artifact = create_backup(str(source_tree), str(destination), keep_n=2)

        names = sorted(p.name for p in destination.iterdir())
        assert names == ["backup_20260130_100001.tar.gz", "backup_20260130_100002.tar.gz"]
        assert artifact.file_path.exists()

    def test_retention_keeps_new_backup_when_names_sort_later(self, source_tree, destination):
        destination.mkdir()
        future = destination / "backup_20990101_000000.tar.gz"
        future.write_bytes(b"data")

        with patch("dirbackup.services.backup.make_timestamp", return_value="20260130_100000"):
            artifact = create_backup(str(source_tree), str(destination), keep_n=1)

        assert artifact.file_path.exists()
        assert not future.exists()

    def test_retention_ignores_dangling_links(self, source_tree, destination):
        destination.mkdir()
        broken = destination / "backup_20200101_000000.tar.gz"
        os.symlink("/nonexistent", broken)

        artifact = create_backup(str(source_tree), str(destination), keep_n=3)

        assert artifact.file_path.exists()
        assert broken.is_symlink()


class TestManageBackups:
    def test_list_and_delete(self, source_tree, destination):
        artifact = create_backup(str(source_tree), str(destination))

        backups = list_backups(str(destination))
        assert [b.name for b in backups] == [artifact.file_path.name]

        delete_backup(str(destination), artifact.file_path.name)
        assert list_backups(str(destination)) == []

    def test_list_missing_destination(self, tmp_path):
        with pytest.raises(DestinationNotFound):
            list_backups(str(tmp_path / "missing"))

    def test_restore(self, source_tree, destination, tmp_path):
        artifact = create_backup(str(source_tree), str(destination))
        target = tmp_path / "restored"

        restore_from_backup(str(artifact.file_path), str(target))

        assert relative_entries(target) == ["a.txt", "b", "b/c.txt"]

    def test_restore_keeps_symlinks(self, source_tree, destination, tmp_path):
        os.symlink("/etc/hosts", source_tree / "hosts")
        os.symlink("a.txt", source_tree / "alias")
        artifact = create_backup(str(source_tree), str(destination))
        target = tmp_path / "restored"

        restore_from_backup(str(artifact.file_path), str(target))

        assert os.readlink(target / "hosts") == "/etc/hosts"
        assert os.readlink(target / "alias") == "a.txt"
        assert (target / "alias").read_text() == "hello"
