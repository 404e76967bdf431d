"""Building blocks for running git hooks: commands, file batching, store, version info and warnings."""

__version__ = "0.0.23"
__all__ = ["process", "run", "store", "user_warnings", "version"]