"""Forward TrueNAS alerts to an ntfy topic."""

__version__ = "0.1.0"
