"""
In-memory store of normalized image records.

The cache is an append-only log: records are kept in insertion order, never
removed and never deduplicated. Growth is unbounded for the lifetime of the
process.
"""

import logging
import threading
from typing import Iterable, List

from mars_raw_images.data.models import ListOfImages, MarsImage
from mars_raw_images.exceptions import InsufficientDataError

logger = logging.getLogger(__name__)


class ImageCache:
    """
    Thread-safe, append-only list of ``MarsImage`` records.

    ``append`` adds a whole batch under the lock, so readers see either none
    or all of it. ``latest`` copies under the same lock.

    Examples
    --------
    >>> cache = ImageCache()
    >>> cache.append(images)
    >>> cache.latest(10).to_dict()
    """

    def __init__(self):
        self._records: List[MarsImage] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def append(self, records: Iterable[MarsImage]) -> int:
        """
        Append ``records`` in order.

        Returns
        -------
        int
            Cache size after the append
        """
        batch = list(records)
        with self._lock:
            self._records.extend(batch)
            size = len(self._records)
        logger.debug(f"Appended {len(batch)} images, cache size {size}")
        return size

    def latest(self, count: int) -> ListOfImages:
        """
        Return the first ``count`` cached records in insertion order.

        Parameters
        ----------
        count : int
            Number of records to return

        Returns
        -------
        ListOfImages

        Raises
        ------
        ValueError
            If ``count`` is negative
        InsufficientDataError
            If fewer than ``count`` records are cached
        """
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count}")

        with self._lock:
            available = len(self._records)
            if count > available:
                raise InsufficientDataError(count, available)
            images = self._records[:count]

        return ListOfImages(images=images)

    def snapshot(self) -> List[MarsImage]:
        """Copy of every cached record."""
        with self._lock:
            return list(self._records)


# Process-wide cache instance
_image_cache = ImageCache()


def get_image_cache() -> ImageCache:
    """Return the process-wide image cache."""
    return _image_cache
