from .pump import Display, DuplexPump, InputSource
from .session import Session, SessionState

__all__ = ["Session", "SessionState", "DuplexPump", "InputSource", "Display"]
