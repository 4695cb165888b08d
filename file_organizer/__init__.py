"""Sort files into category folders by extension with a concurrent worker pool."""

from __future__ import annotations

from file_organizer.organize import __version__

__all__ = ["__version__"]
