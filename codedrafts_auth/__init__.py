"""Authentication and token lifecycle core for the CodeDrafts platform."""

__version__ = "0.1.0"
