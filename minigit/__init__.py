"""A minimal version control system: staging, commits, branches, merges and diffs."""

__version__ = "1.0.0"
__all__ = ["__version__"]