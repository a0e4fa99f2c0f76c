"""Live terminal dashboard."""

from .terminal import RawTerminal, TerminalUI, layout_row

__all__ = ["RawTerminal", "TerminalUI", "layout_row"]
