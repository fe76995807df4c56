"""audioflash: a timed audio flashcard game."""

__version__ = "0.1.0"
