from .console import ConsoleDisplay, ConsoleInput

__all__ = ["ConsoleDisplay", "ConsoleInput"]
