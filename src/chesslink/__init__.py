"""chesslink — keeps a local chess session in sync with a remote room.

Quick start::

    from chesslink import SessionController, SessionSettings
    from chesslink.core import Color

    session = SessionController(SessionSettings(think_delay_ms=300))
    session.start(Color.WHITE, vs_bot=True)
    session.start_bot()
"""

from chesslink.config import SessionSettings
from chesslink.game.controller import SessionController, SessionEvents

__all__ = [
    "SessionController",
    "SessionEvents",
    "SessionSettings",
]
