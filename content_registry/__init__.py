"""Content registry: built-in prompts and resources with pluggable storage."""

__version__ = "0.1.0"
