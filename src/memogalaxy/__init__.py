"""MemoGalaxy — a personal mood diary backed by plain JSON files."""

__version__ = "0.1.0"
