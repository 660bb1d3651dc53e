from .connector import connect, run_session

__all__ = ["connect", "run_session"]
