from .console import ConsoleChat

__all__ = ["ConsoleChat"]
