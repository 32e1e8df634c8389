"""Tests for diary backup and restore."""

import struct
import zipfile

import pytest

from memogalaxy.core.exceptions import BackupError
from memogalaxy.diary import EntryStore, create_backup, encode_entry, restore_backup, restore_into_store
from memogalaxy.diary.backup import BACKUP_PREFIX


@pytest.fixture
def backup_dir(tmp_path):
    return tmp_path / "backups"


async def _seed(entries_dir, make_entry, count=3) -> EntryStore:
    store = EntryStore(entries_dir)
    for i in range(count):
        await store.add(make_entry(str(i), day=i + 1).with_comment(f"note {i}"))
    return store


class TestCreateBackup:
    async def test_archives_every_record(self, entries_dir, backup_dir, make_entry):
        await _seed(entries_dir, make_entry)
        (entries_dir / "notes.txt").write_text("not a record")

        archive = create_backup(entries_dir, backup_dir)

        assert archive.parent == backup_dir
        assert archive.name.startswith(BACKUP_PREFIX)
        with zipfile.ZipFile(archive) as zf:
            assert sorted(zf.namelist()) == ["0.json", "1.json", "2.json"]

    def test_missing_entries_dir(self, tmp_path, backup_dir):
        with pytest.raises(BackupError, match="not found"):
            create_backup(tmp_path / "nope", backup_dir)

    async def test_back_to_back_backups_are_kept(self, entries_dir, backup_dir, make_entry):
        await _seed(entries_dir, make_entry, count=1)
        first = create_backup(entries_dir, backup_dir)
        second = create_backup(entries_dir, backup_dir)

        assert first != second
        assert sorted(backup_dir.iterdir()) == sorted([first, second])


class TestRestoreBackup:
    async def test_backup_wipe_restore(self, entries_dir, backup_dir, make_entry):
        store = await _seed(entries_dir, make_entry)
        original = store.entries
        archive = create_backup(entries_dir, backup_dir)

        for path in entries_dir.iterdir():
            path.unlink()
        assert await store.load() == []

        restored = await restore_into_store(store, archive)
        assert tuple(restored) == original
        assert store.entries == original

    async def test_merge_keeps_newer_records(self, entries_dir, backup_dir, make_entry):
        store = await _seed(entries_dir, make_entry, count=1)
        archive = create_backup(entries_dir, backup_dir)
        await store.add(make_entry("later", day=9))

        assert restore_backup(archive, entries_dir) == 1
        assert [e.id for e in await store.load()] == ["later", "0"]

    async def test_replace_drops_newer_records(self, entries_dir, backup_dir, make_entry):
        store = await _seed(entries_dir, make_entry, count=1)
        archive = create_backup(entries_dir, backup_dir)
        await store.add(make_entry("later", day=9))

        await restore_into_store(store, archive, replace=True)
        assert [e.id for e in store.entries] == ["0"]

    def test_unsafe_members_are_ignored(self, tmp_path, entries_dir, make_entry):
        archive = tmp_path / "crafted.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr("ok.json", encode_entry(make_entry("ok")))
            zf.writestr("../escape.json", b"{}")
            zf.writestr("nested/inner.json", b"{}")
            zf.writestr(".hidden.json", b"{}")

        assert restore_backup(archive, entries_dir) == 1
        assert sorted(p.name for p in entries_dir.iterdir()) == ["ok.json"]
        assert not (tmp_path / "escape.json").exists()

    def test_not_a_zip(self, tmp_path, entries_dir):
        bogus = tmp_path / "bogus.zip"
        bogus.write_text("definitely not a zip")
        with pytest.raises(BackupError, match="Not a valid backup"):
            restore_backup(bogus, entries_dir)

    def test_missing_archive(self, tmp_path, entries_dir):
        with pytest.raises(BackupError, match="not found"):
            restore_backup(tmp_path / "gone.zip", entries_dir)

    async def test_damaged_member_leaves_records_alone(self, tmp_path, entries_dir, backup_dir, make_entry):
        await _seed(entries_dir, make_entry, count=1)
        before = (entries_dir / "0.json").read_bytes()
        archive = create_backup(entries_dir, backup_dir)

        data = bytearray(archive.read_bytes())
        with zipfile.ZipFile(archive) as zf:
            info = zf.getinfo("0.json")
        name_len, extra_len = struct.unpack("<HH", data[info.header_offset + 26 : info.header_offset + 30])
        start = info.header_offset + 30 + name_len + extra_len
        data[start + info.compress_size // 2] ^= 0xFF
        damaged = tmp_path / "damaged.zip"
        damaged.write_bytes(bytes(data))

        with pytest.raises(BackupError, match="Not a valid backup"):
            restore_backup(damaged, entries_dir, replace=True)
        assert sorted(p.name for p in entries_dir.iterdir()) == ["0.json"]
        assert (entries_dir / "0.json").read_bytes() == before
