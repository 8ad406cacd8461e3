"""Who's Older: a daily guess-the-older-person game backend."""

__version__ = "0.1.0"
