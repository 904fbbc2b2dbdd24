"""Application context with dependency injection."""

from dataclasses import dataclass

from pwin.core.config_store import ConfigStore, FakeConfigStore, PwinConfig, RealConfigStore
from pwin.core.lock_store import FakeLockStore, LockStore, RealLockStore
from pwin.core.platform import Arch, detect_arch
from pwin.core.win_php import FakeWinPhp, RealWinPhp, WinPhp


@dataclass(frozen=True)
class PwinContext:
    """Immutable context holding all dependencies for pwin operations.

    Created at CLI entry point and threaded through the application.
    Frozen to prevent accidental modification at runtime. Configuration and
    the lock file are read through their stores at the start of each
    operation, never cached here.
    """

    config_store: ConfigStore
    lock_store: LockStore
    win_php: WinPhp
    arch: Arch  # Detected from the running interpreter, not configurable

    @staticmethod
    def for_test(
        config_store: ConfigStore | None = None,
        lock_store: LockStore | None = None,
        win_php: WinPhp | None = None,
        arch: Arch = Arch.X64,
        config: PwinConfig | None = None,
    ) -> "PwinContext":
        """Create test context with optional pre-configured integration classes.

        Args:
            config_store: Optional ConfigStore. If None, creates FakeConfigStore
                holding config.
            lock_store: Optional LockStore. If None, creates empty FakeLockStore.
            win_php: Optional WinPhp client. If None, creates FakeWinPhp with an
                empty catalog.
            arch: Host architecture to report (default X64).
            config: Config for the default FakeConfigStore; ignored when
                config_store is given.

        Example:
            >>> ctx = PwinContext.for_test(
            ...     win_php=FakeWinPhp(releases_json=RELEASES),
            ...     config=PwinConfig(install_path=tmp_path),
            ... )
        """
        return PwinContext(
            config_store=config_store if config_store is not None else FakeConfigStore(config),
            lock_store=lock_store if lock_store is not None else FakeLockStore(),
            win_php=win_php if win_php is not None else FakeWinPhp(),
            arch=arch,
        )


def create_context() -> PwinContext:
    """Create production context with real implementations.

    Called at CLI entry point to create the context for the entire
    command execution.
    """
    return PwinContext(
        config_store=RealConfigStore(),
        lock_store=RealLockStore(),
        win_php=RealWinPhp(),
        arch=detect_arch(),
    )
