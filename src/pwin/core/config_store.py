"""User configuration data structures and loading.

Provides immutable configuration loaded from ~/.pwin.toml at the CLI entry
point. Both keys are optional; a missing file means all defaults.
"""

import tomllib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

import tomlkit
from tomlkit.exceptions import ParseError as TomlkitParseError

from pwin.core.errors import StorageError
from pwin.core.platform import ThreadSafety

DEFAULT_INSTALL_PATH = Path("C:\\")
DEFAULT_THREAD_SAFETY = ThreadSafety.NON_SAFE


@dataclass(frozen=True)
class PwinConfig:
    """Immutable user configuration.

    install_path is the base directory holding one sub-directory per
    installed version. thread_safety selects between TS and NTS builds.
    """

    install_path: Path = DEFAULT_INSTALL_PATH
    thread_safety: ThreadSafety = DEFAULT_THREAD_SAFETY


class ConfigStore(ABC):
    """Abstract interface for configuration access.

    Provides dependency injection for config access, enabling in-memory
    implementations for tests without touching the filesystem.
    """

    @abstractmethod
    def exists(self) -> bool:
        """Check if a configuration has been saved."""
        ...

    @abstractmethod
    def load(self) -> PwinConfig:
        """Load configuration, falling back to defaults for missing keys.

        Raises:
            StorageError: If the file exists but is unreadable or malformed
        """
        ...

    @abstractmethod
    def save(self, config: PwinConfig) -> None:
        """Save configuration.

        Raises:
            StorageError: If the file cannot be written
        """
        ...

    @abstractmethod
    def path(self) -> Path:
        """Get the path to the config file (for error messages)."""
        ...


def config_from_dict(data: dict, source: Path) -> PwinConfig:
    raw_path = data.get("path")
    raw_ts = data.get("thread_safety")

    if raw_path is not None and not isinstance(raw_path, str):
        raise StorageError(f"'path' in {source} must be a string")

    thread_safety = DEFAULT_THREAD_SAFETY
    if raw_ts is not None:
        try:
            thread_safety = ThreadSafety(raw_ts)
        except ValueError:
            raise StorageError(
                f"'thread_safety' in {source} must be \"Safe\" or \"NonSafe\", got {raw_ts!r}"
            ) from None

    return PwinConfig(
        install_path=Path(raw_path) if raw_path else DEFAULT_INSTALL_PATH,
        thread_safety=thread_safety,
    )


class RealConfigStore(ConfigStore):
    """Production implementation that reads/writes ~/.pwin.toml."""

    def __init__(self, config_path: Path | None = None) -> None:
        self._path = config_path if config_path is not None else Path.home() / ".pwin.toml"

    def exists(self) -> bool:
        return self._path.exists()

    def load(self) -> PwinConfig:
        try:
            content = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return PwinConfig()
        except OSError as e:
            raise StorageError(f"Could not open config file {self._path}: {e}") from e

        try:
            data = tomllib.loads(content)
        except tomllib.TOMLDecodeError as e:
            raise StorageError(f"Could not parse config file {self._path}: {e}") from e

        return config_from_dict(data, self._path)

    def save(self, config: PwinConfig) -> None:
        """Save configuration to ~/.pwin.toml.

        Existing comments and unknown keys are preserved using tomlkit. A path
        equal to the default is written as an absent key.
        """
        try:
            if self._path.exists():
                doc = tomlkit.parse(self._path.read_text(encoding="utf-8"))
            else:
                doc = tomlkit.document()
                doc.add(tomlkit.comment("pwin configuration"))
        except (OSError, TomlkitParseError) as e:
            raise StorageError(f"Could not read config file {self._path}: {e}") from e

        if config.install_path == DEFAULT_INSTALL_PATH:
            doc.pop("path", None)
        else:
            doc["path"] = str(config.install_path)
        doc["thread_safety"] = config.thread_safety.value

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(tomlkit.dumps(doc), encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Could not write config file {self._path}: {e}") from e

    def path(self) -> Path:
        return self._path


class FakeConfigStore(ConfigStore):
    """Test implementation that stores config in memory without touching filesystem."""

    def __init__(self, config: PwinConfig | None = None) -> None:
        """Initialize in-memory config store.

        Args:
            config: Initial config state (None = config doesn't exist)
        """
        self._config = config

    @property
    def config(self) -> PwinConfig | None:
        """Get the stored config for test assertions."""
        return self._config

    def exists(self) -> bool:
        return self._config is not None

    def load(self) -> PwinConfig:
        if self._config is None:
            return PwinConfig()
        return self._config

    def save(self, config: PwinConfig) -> None:
        self._config = config

    def path(self) -> Path:
        return Path("/fake/home/.pwin.toml")
