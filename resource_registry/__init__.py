"""
Top‑level package for the Resource Registry.

The package provides no public exports; all functionality lives in
submodules under ``app``.
"""

__all__ = []
