"""Client for the windows.php.net release downloads."""

from pwin.core.win_php.abc import WinPhp
from pwin.core.win_php.fake import FakeWinPhp
from pwin.core.win_php.real import RealWinPhp

__all__ = ["FakeWinPhp", "RealWinPhp", "WinPhp"]
