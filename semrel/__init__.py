"""semrel: automated release decisions driven by commit history."""

__version__ = "0.1.0"
