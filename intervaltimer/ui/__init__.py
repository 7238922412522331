"""UI package."""

from .console_view import ConsoleView, render

__all__ = ["ConsoleView", "render"]
