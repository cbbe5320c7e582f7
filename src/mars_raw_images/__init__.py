"""
Mars Raw Images

Fetches the MSL raw-image manifest, follows per-sol catalogs and keeps the
full-size image records in an in-memory cache.
"""

from mars_raw_images.__version__ import __version__

__all__ = ["__version__"]
