"""ReelStack: save, enrich, and browse short-form video links."""

__version__ = "0.1.0"

__all__ = ["__version__"]
