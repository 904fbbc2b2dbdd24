"""End-to-end tests for install, remove, update and info against fakes."""

import shutil
from pathlib import Path

import pytest

from pwin.core.config_store import PwinConfig
from pwin.core.context import PwinContext
from pwin.core.errors import (
    ArchiveFormatError,
    ChecksumMismatchError,
    DeleteFailedError,
    DestinationNotDirectoryError,
    ExtractError,
    HttpStatusError,
    PwinError,
    StorageError,
    TransportError,
    UnsafeArchivePathError,
    VersionNotFoundError,
)
from pwin.core.lock_file import InstalledEntry, LockFile
from pwin.core.lock_store import FakeLockStore
from pwin.core.platform import Arch, ThreadSafety
from pwin.core.version import PhpVersion
from pwin.core.version_manager import (
    InstallStatus,
    RemoveStatus,
    UpdateStatus,
    info,
    install,
    remove,
    update,
)
from pwin.core.win_php import FakeWinPhp
from tests.test_utils.pwin_builders import (
    build_entry,
    make_corrupt_zip,
    make_releases,
    make_zip,
    release_entry,
    standard_catalog,
    zip_name,
)


def _v(text: str) -> PhpVersion:
    return PhpVersion.parse(text)


def _entry(version: str, ts: ThreadSafety = ThreadSafety.NON_SAFE) -> InstalledEntry:
    return InstalledEntry(version=_v(version), thread_safety=ts, arch=Arch.X64)


def _context(
    tmp_path: Path,
    *,
    win_php: FakeWinPhp | None = None,
    lock_store: FakeLockStore | None = None,
    thread_safety: ThreadSafety = ThreadSafety.NON_SAFE,
    arch: Arch = Arch.X64,
) -> PwinContext:
    if win_php is None:
        releases_json, files = standard_catalog()
        win_php = FakeWinPhp(releases_json=releases_json, files=files)
    return PwinContext.for_test(
        lock_store=lock_store,
        win_php=win_php,
        arch=arch,
        config=PwinConfig(install_path=tmp_path, thread_safety=thread_safety),
    )


class TestInstall:
    def test_installs_latest_patch(self, tmp_path: Path) -> None:
        lock_store = FakeLockStore()
        ctx = _context(tmp_path, lock_store=lock_store)

        result = install(ctx, _v("8.1"))

        assert result.status is InstallStatus.INSTALLED
        assert result.version == PhpVersion(8, 1, 17)
        assert result.variant == "nts-vs16-x64"
        assert result.install_dir == tmp_path / "8.1.17"
        assert (tmp_path / "8.1.17" / "php.exe").read_bytes() == b"MZ php"
        assert (tmp_path / "8.1.17" / "ext" / "php_curl.dll").exists()

        persisted = lock_store.lock
        assert persisted is not None
        assert persisted.entries() == [_entry("8.1.17")]

    def test_archive_is_removed_after_extraction(self, tmp_path: Path) -> None:
        install(_context(tmp_path), _v("8.1"))

        assert list(tmp_path.glob("*.zip")) == []

    def test_thread_safety_and_arch_select_the_variant(self, tmp_path: Path) -> None:
        releases_json, files = standard_catalog()
        win_php = FakeWinPhp(releases_json=releases_json, files=files)
        ctx = _context(tmp_path, win_php=win_php, thread_safety=ThreadSafety.SAFE, arch=Arch.X86)

        result = install(ctx, _v("8.1"))

        assert result.variant == "ts-vs16-x86"
        assert win_php.download_calls[0][0] == zip_name("8.1.17", "ts-vs16-x86")

    def test_already_installed_makes_no_requests(self, tmp_path: Path) -> None:
        releases_json, files = standard_catalog()
        win_php = FakeWinPhp(releases_json=releases_json, files=files)
        lock_store = FakeLockStore(LockFile(versions=[_entry("8.1.10")]))
        ctx = _context(tmp_path, win_php=win_php, lock_store=lock_store)

        result = install(ctx, _v("8.1.17"))

        assert result.status is InstallStatus.ALREADY_INSTALLED
        assert result.version == PhpVersion(8, 1, 10)
        assert win_php.request_count == 0
        assert lock_store.save_count == 0

    def test_second_install_is_already_installed(self, tmp_path: Path) -> None:
        ctx = _context(tmp_path)
        install(ctx, _v("8.1"))

        result = install(ctx, _v("8.1"))

        assert result.status is InstallStatus.ALREADY_INSTALLED

    def test_unknown_version(self, tmp_path: Path) -> None:
        lock_store = FakeLockStore()
        ctx = _context(tmp_path, lock_store=lock_store)

        with pytest.raises(VersionNotFoundError):
            install(ctx, _v("9.9"))

        assert lock_store.save_count == 0
        assert list(tmp_path.iterdir()) == []

    def test_no_matching_build(self, tmp_path: Path) -> None:
        lock_store = FakeLockStore()
        ctx = _context(tmp_path, lock_store=lock_store, arch=Arch.UNSUPPORTED)

        result = install(ctx, _v("8.1"))

        assert result.status is InstallStatus.NO_MATCHING_BUILD
        assert result.variant is None
        assert lock_store.save_count == 0
        assert list(tmp_path.iterdir()) == []

    def test_checksum_mismatch_leaves_nothing_behind(self, tmp_path: Path) -> None:
        good = make_zip({"php.exe": b"real"})
        path = zip_name("8.2.4", "nts-vs16-x64")
        releases_json = make_releases(
            {"8.2": {"version": "8.2.4", "nts-vs16-x64": build_entry(path, good)}}
        )
        win_php = FakeWinPhp(releases_json=releases_json, files={path: make_zip({"evil": b""})})
        lock_store = FakeLockStore()
        ctx = _context(tmp_path, win_php=win_php, lock_store=lock_store)

        with pytest.raises(ChecksumMismatchError):
            install(ctx, _v("8.2"))

        assert not (tmp_path / path).exists()
        assert not (tmp_path / "8.2.4").exists()
        assert lock_store.save_count == 0

    def test_empty_checksum_is_not_verified(self, tmp_path: Path) -> None:
        data = make_zip({"php.exe": b"x"})
        path = zip_name("8.2.4", "nts-vs16-x64")
        releases_json = make_releases(
            {"8.2": {"version": "8.2.4", "nts-vs16-x64": build_entry(path, data, sha256="")}}
        )
        win_php = FakeWinPhp(releases_json=releases_json, files={path: data})
        ctx = _context(tmp_path, win_php=win_php)

        assert install(ctx, _v("8.2")).status is InstallStatus.INSTALLED

    def test_failed_download_is_not_recorded(self, tmp_path: Path) -> None:
        releases_json, _files = standard_catalog()
        lock_store = FakeLockStore()
        win_php = FakeWinPhp(releases_json=releases_json)
        ctx = _context(tmp_path, win_php=win_php, lock_store=lock_store)

        with pytest.raises(HttpStatusError):
            install(ctx, _v("8.1"))

        assert lock_store.save_count == 0

    def test_catalog_failure_propagates(self, tmp_path: Path) -> None:
        ctx = _context(tmp_path, win_php=FakeWinPhp(releases_error=TransportError("offline")))

        with pytest.raises(TransportError):
            install(ctx, _v("8.1"))

    def test_creates_missing_install_path(self, tmp_path: Path) -> None:
        base = tmp_path / "php" / "versions"
        install(_context(base), _v("8.1"))

        assert (base / "8.1.17" / "php.exe").exists()

    def test_lock_save_failure_propagates(self, tmp_path: Path) -> None:
        ctx = _context(tmp_path, lock_store=FakeLockStore(fail_on_save=True))

        with pytest.raises(StorageError):
            install(ctx, _v("8.1"))

    @pytest.mark.parametrize(
        ("zip_bytes", "file_at_target", "expected"),
        [
            (make_corrupt_zip(), False, ArchiveFormatError),
            (make_zip({"../escape.txt": b"owned"}), False, UnsafeArchivePathError),
            (None, True, DestinationNotDirectoryError),
        ],
        ids=["corrupt-member", "unsafe-path", "target-is-file"],
    )
    def test_extract_failure_is_not_recorded(
        self,
        tmp_path: Path,
        zip_bytes: bytes | None,
        file_at_target: bool,
        expected: type[ExtractError],
    ) -> None:
        base = tmp_path / "php"
        base.mkdir()
        if file_at_target:
            (base / "8.1.17").write_text("in the way")
        releases_json, files = standard_catalog(zip_bytes=zip_bytes)
        lock_store = FakeLockStore()
        ctx = _context(
            base,
            win_php=FakeWinPhp(releases_json=releases_json, files=files),
            lock_store=lock_store,
        )

        with pytest.raises(expected):
            install(ctx, _v("8.1"))

        assert lock_store.save_count == 0
        assert list(base.glob("*.zip")) == []
        assert not (base / "escape.txt").exists()


class TestRemove:
    def test_remove_deletes_directory_and_entry(self, tmp_path: Path) -> None:
        lock_store = FakeLockStore()
        ctx = _context(tmp_path, lock_store=lock_store)
        install(ctx, _v("8.1"))

        result = remove(ctx, _v("8.1"))

        assert result.status is RemoveStatus.REMOVED
        assert result.version == PhpVersion(8, 1, 17)
        assert not (tmp_path / "8.1.17").exists()
        persisted = lock_store.lock
        assert persisted is not None
        assert not persisted.has(_v("8.1"))

    def test_remove_not_installed(self, tmp_path: Path) -> None:
        lock_store = FakeLockStore()
        ctx = _context(tmp_path, lock_store=lock_store)

        result = remove(ctx, _v("7.4"))

        assert result.status is RemoveStatus.NOT_INSTALLED
        assert lock_store.save_count == 0

    def test_remove_makes_no_requests(self, tmp_path: Path) -> None:
        win_php = FakeWinPhp()
        (tmp_path / "8.0.30").mkdir()
        lock_store = FakeLockStore(LockFile(versions=[_entry("8.0.30")]))

        remove(_context(tmp_path, win_php=win_php, lock_store=lock_store), _v("8.0"))

        assert win_php.request_count == 0
        assert not (tmp_path / "8.0.30").exists()

    def test_missing_directory_still_drops_entry(self, tmp_path: Path) -> None:
        lock_store = FakeLockStore(LockFile(versions=[_entry("8.0.30")]))

        result = remove(_context(tmp_path, lock_store=lock_store), _v("8.0"))

        assert result.status is RemoveStatus.REMOVED
        persisted = lock_store.lock
        assert persisted is not None
        assert len(persisted) == 0

    def test_delete_failure_keeps_entry(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "8.0.30").mkdir()
        lock_store = FakeLockStore(LockFile(versions=[_entry("8.0.30")]))

        def failing_rmtree(path: Path) -> None:
            raise PermissionError(f"{path} is in use")

        monkeypatch.setattr(shutil, "rmtree", failing_rmtree)

        with pytest.raises(DeleteFailedError):
            remove(_context(tmp_path, lock_store=lock_store), _v("8.0"))

        assert lock_store.save_count == 0
        persisted = lock_store.lock
        assert persisted is not None
        assert persisted.has(_v("8.0"))


class TestUpdate:
    def _installed(self, tmp_path: Path, version: str) -> FakeLockStore:
        (tmp_path / version).mkdir()
        (tmp_path / version / "php.exe").write_bytes(b"old")
        return FakeLockStore(LockFile(versions=[_entry(version)]))

    def test_updates_to_latest_patch(self, tmp_path: Path) -> None:
        lock_store = self._installed(tmp_path, "8.1.10")
        ctx = _context(tmp_path, lock_store=lock_store)

        actions = update(ctx, None, dry_run=False)

        assert [a.status for a in actions] == [UpdateStatus.UPDATED]
        assert actions[0].installed == PhpVersion(8, 1, 10)
        assert actions[0].available == PhpVersion(8, 1, 17)
        assert not (tmp_path / "8.1.10").exists()
        assert (tmp_path / "8.1.17" / "php.exe").read_bytes() == b"MZ php"
        persisted = lock_store.lock
        assert persisted is not None
        assert persisted.entries() == [_entry("8.1.17")]

    def test_update_keeps_entry_thread_safety(self, tmp_path: Path) -> None:
        (tmp_path / "8.1.10").mkdir()
        lock_store = FakeLockStore(LockFile(versions=[_entry("8.1.10", ThreadSafety.SAFE)]))
        releases_json, files = standard_catalog()
        win_php = FakeWinPhp(releases_json=releases_json, files=files)
        # Configured NTS, but the installed entry is TS
        ctx = _context(tmp_path, win_php=win_php, lock_store=lock_store)

        update(ctx, _v("8.1"), dry_run=False)

        assert win_php.download_calls[0][0] == zip_name("8.1.17", "ts-vs16-x64")
        persisted = lock_store.lock
        assert persisted is not None
        assert persisted.entries() == [_entry("8.1.17", ThreadSafety.SAFE)]

    def test_dry_run_changes_nothing(self, tmp_path: Path) -> None:
        lock_store = self._installed(tmp_path, "8.1.10")
        releases_json, files = standard_catalog()
        win_php = FakeWinPhp(releases_json=releases_json, files=files)
        ctx = _context(tmp_path, win_php=win_php, lock_store=lock_store)

        actions = update(ctx, None, dry_run=True)

        assert [a.status for a in actions] == [UpdateStatus.WOULD_UPDATE]
        assert win_php.download_calls == []
        assert lock_store.save_count == 0
        assert (tmp_path / "8.1.10" / "php.exe").exists()

    def test_up_to_date(self, tmp_path: Path) -> None:
        lock_store = self._installed(tmp_path, "8.1.17")
        ctx = _context(tmp_path, lock_store=lock_store)

        actions = update(ctx, None, dry_run=False)

        assert [a.status for a in actions] == [UpdateStatus.UP_TO_DATE]
        assert lock_store.save_count == 0

    def test_line_missing_from_catalog(self, tmp_path: Path) -> None:
        lock_store = self._installed(tmp_path, "7.4.33")
        ctx = _context(tmp_path, lock_store=lock_store)

        actions = update(ctx, None, dry_run=False)

        assert [a.status for a in actions] == [UpdateStatus.NOT_IN_CATALOG]
        assert (tmp_path / "7.4.33").exists()

    def test_target_not_installed_makes_no_requests(self, tmp_path: Path) -> None:
        win_php = FakeWinPhp()
        ctx = _context(tmp_path, win_php=win_php)

        actions = update(ctx, _v("8.3"), dry_run=False)

        assert [a.status for a in actions] == [UpdateStatus.NOT_INSTALLED]
        assert win_php.request_count == 0

    def test_nothing_installed(self, tmp_path: Path) -> None:
        win_php = FakeWinPhp()

        assert update(_context(tmp_path, win_php=win_php), None, dry_run=False) == []
        assert win_php.request_count == 0

    @pytest.mark.parametrize(
        ("served", "expected"),
        [
            ({}, HttpStatusError),
            ({zip_name("8.1.17", "nts-vs16-x64"): b"tampered"}, ChecksumMismatchError),
        ],
        ids=["download-404", "checksum-mismatch"],
    )
    def test_failed_download_keeps_old_version(
        self, tmp_path: Path, served: dict[str, bytes], expected: type[PwinError]
    ) -> None:
        lock_store = self._installed(tmp_path, "8.1.10")
        releases_json, _files = standard_catalog()
        win_php = FakeWinPhp(releases_json=releases_json, files=served)
        ctx = _context(tmp_path, win_php=win_php, lock_store=lock_store)

        with pytest.raises(expected):
            update(ctx, None, dry_run=False)

        assert (tmp_path / "8.1.10" / "php.exe").read_bytes() == b"old"
        assert lock_store.save_count == 0
        persisted = lock_store.lock
        assert persisted is not None
        assert persisted.entries() == [_entry("8.1.10")]
        assert list(tmp_path.glob("*.zip")) == []

    def test_failed_extraction_keeps_old_version(self, tmp_path: Path) -> None:
        lock_store = self._installed(tmp_path, "8.1.10")
        releases_json, files = standard_catalog(zip_bytes=make_corrupt_zip())
        win_php = FakeWinPhp(releases_json=releases_json, files=files)
        ctx = _context(tmp_path, win_php=win_php, lock_store=lock_store)

        with pytest.raises(ArchiveFormatError):
            update(ctx, None, dry_run=False)

        assert (tmp_path / "8.1.10" / "php.exe").read_bytes() == b"old"
        assert lock_store.save_count == 0

    def test_no_build_for_entry_arch(self, tmp_path: Path) -> None:
        (tmp_path / "8.1.10").mkdir()
        entry = InstalledEntry(_v("8.1.10"), ThreadSafety.NON_SAFE, Arch.X86)
        lock_store = FakeLockStore(LockFile(versions=[entry]))
        data = make_zip({"php.exe": b"new"})
        releases_json = make_releases(
            {"8.1": release_entry("8.1.17", {"nts-vs16-x64": data})}
        )
        ctx = _context(
            tmp_path,
            win_php=FakeWinPhp(releases_json=releases_json),
            lock_store=lock_store,
        )

        actions = update(ctx, None, dry_run=False)

        assert [a.status for a in actions] == [UpdateStatus.NO_MATCHING_BUILD]
        assert actions[0].thread_safety is ThreadSafety.NON_SAFE
        assert actions[0].arch is Arch.X86
        assert (tmp_path / "8.1.10").exists()
        assert lock_store.save_count == 0

    def test_updates_each_installed_line(self, tmp_path: Path) -> None:
        (tmp_path / "8.1.10").mkdir()
        (tmp_path / "8.2.1").mkdir()
        lock_store = FakeLockStore(LockFile(versions=[_entry("8.1.10"), _entry("8.2.1")]))
        data = make_zip({"php.exe": b"new"})
        releases_json = make_releases(
            {
                "8.1": release_entry("8.1.17", {"nts-vs16-x64": data}),
                "8.2": release_entry("8.2.4", {"nts-vs16-x64": data}),
            }
        )
        files = {
            zip_name("8.1.17", "nts-vs16-x64"): data,
            zip_name("8.2.4", "nts-vs16-x64"): data,
        }
        ctx = _context(
            tmp_path,
            win_php=FakeWinPhp(releases_json=releases_json, files=files),
            lock_store=lock_store,
        )

        actions = update(ctx, None, dry_run=False)

        assert [a.status for a in actions] == [UpdateStatus.UPDATED, UpdateStatus.UPDATED]
        persisted = lock_store.lock
        assert persisted is not None
        assert [str(e.version) for e in persisted] == ["8.1.17", "8.2.4"]


def test_info_lists_entries_in_order(tmp_path: Path) -> None:
    entries = [_entry("8.2.4"), _entry("7.4.33", ThreadSafety.SAFE)]
    ctx = _context(tmp_path, lock_store=FakeLockStore(LockFile(versions=entries)))

    assert info(ctx) == entries


def test_info_empty(tmp_path: Path) -> None:
    assert info(_context(tmp_path)) == []
