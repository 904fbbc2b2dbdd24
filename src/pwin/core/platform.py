"""Thread-safety modes and CPU architectures of PHP builds."""

import platform
import struct
from enum import Enum


class ThreadSafety(Enum):
    """Whether a build guards interpreter state with locks.

    Values are the names persisted in ~/.pwin.toml and ~/.pwin.lock.
    """

    SAFE = "Safe"
    NON_SAFE = "NonSafe"

    @property
    def token(self) -> str:
        """Marker used in releases.json variant names (`ts-vs16-x64`)."""
        if self is ThreadSafety.SAFE:
            return "ts"
        return "nts"

    @property
    def label(self) -> str:
        if self is ThreadSafety.SAFE:
            return "TS"
        return "NTS"

    @staticmethod
    def from_user_input(value: str) -> "ThreadSafety":
        """Accept `ts`/`safe` or `nts`/`nonsafe`, any case.

        Raises:
            ValueError: If the value names neither mode
        """
        normalized = value.strip().lower().replace("-", "").replace("_", "")
        if normalized in ("ts", "safe"):
            return ThreadSafety.SAFE
        if normalized in ("nts", "nonsafe"):
            return ThreadSafety.NON_SAFE
        raise ValueError(f"Invalid thread safety mode: {value} (expected ts or nts)")


class Arch(Enum):
    X86 = "X86"
    X64 = "X64"
    UNSUPPORTED = "Unsupported"

    @property
    def token(self) -> str:
        """Marker used in releases.json variant names."""
        return self.value.lower()


_X64_MACHINES = ("amd64", "x86_64", "x64")
_X86_MACHINES = ("x86", "i386", "i486", "i586", "i686")


def detect_arch() -> Arch:
    """Architecture of the running interpreter.

    A 32-bit Python on a 64-bit machine reports X86, matching the binaries
    that interpreter can load.
    """
    machine = platform.machine().lower()
    pointer_bits = struct.calcsize("P") * 8

    if machine in _X64_MACHINES:
        if pointer_bits == 32:
            return Arch.X86
        return Arch.X64
    if machine in _X86_MACHINES:
        return Arch.X86
    return Arch.UNSUPPORTED
