"""Textual playground; the app module needs the optional ``textual`` extra."""

from .controller import PlaygroundHooks, TextualPlaygroundAdapter

__all__ = ["PlaygroundHooks", "TextualPlaygroundAdapter"]
