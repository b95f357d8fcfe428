"""configbridge — GitHub OAuth bridge that publishes admin config files."""

__version__ = "0.1.0"
