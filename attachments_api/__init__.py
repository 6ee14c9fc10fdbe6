"""
Top‑level package for the Resource Attachments API.

This file makes ``attachments_api`` a Python package so that modules
within ``app`` can be imported using fully qualified names like
``attachments_api.app.main``.

The package provides no public exports; all functionality lives in
submodules under ``app``.
"""

__all__ = []
