"""
Loads the most recent sols of an image manifest into the image cache.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import List, Optional, Tuple

from tqdm import tqdm

from mars_raw_images.data.image_cache import ImageCache, get_image_cache
from mars_raw_images.data.models import (
    ImageManifest,
    ListOfImages,
    LoadReport,
    ManifestSol,
    SolCatalog,
    SolOutcome,
)
from mars_raw_images.data.normalizer import normalize_catalog
from mars_raw_images.data.raw_images_client import RawImagesClient
from mars_raw_images.exceptions import FetchError
from mars_raw_images.utils.config import get_config

logger = logging.getLogger(__name__)


class CacheLoader:
    """
    Fetches sol catalogs and appends their full-size images to an ``ImageCache``.

    Catalogs are fetched concurrently, but each sol is appended as one batch
    and sols are appended in manifest order. A sol whose catalog cannot be
    fetched is logged and reported as failed; loading continues with the
    remaining sols.

    Parameters
    ----------
    client : RawImagesClient, optional
        Client used for catalog requests. A new one is created (and closed
        by :meth:`close`) if omitted.
    cache : ImageCache, optional
        Destination cache. Defaults to the process-wide cache.
    max_workers : int, optional
        Concurrent catalog fetches. Defaults to MARS_IMAGES_MAX_WORKERS;
        1 fetches one sol at a time.
    show_progress : bool
        Whether to show a tqdm progress bar (default: False)
    poll_interval : float
        How often, in seconds, a wait on a pending fetch checks for
        cancellation

    Examples
    --------
    >>> with RawImagesClient() as client:
    ...     manifest = client.fetch_manifest(get_config().manifest_url)
    ...     loader = CacheLoader(client=client)
    ...     report = loader.load_latest(manifest, 3)
    >>> report.summary()
    """

    def __init__(
        self,
        client: Optional[RawImagesClient] = None,
        cache: Optional[ImageCache] = None,
        max_workers: Optional[int] = None,
        show_progress: bool = False,
        poll_interval: float = 0.1,
    ):
        self._owns_client = client is None
        self.client = client or RawImagesClient()
        self.cache = cache if cache is not None else get_image_cache()
        self.max_workers = max_workers if max_workers is not None else get_config().max_workers
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        self.show_progress = show_progress
        self.poll_interval = poll_interval

        self._cancel_event = threading.Event()

    def cancel(self):
        """
        Stop the running ``load_latest`` before its next append.

        Called while no load is running, it cancels the next one.
        """
        logger.info("Cancellation requested")
        self._cancel_event.set()

    def _is_cancelled(self, cancel_event: Optional[threading.Event]) -> bool:
        if self._cancel_event.is_set():
            return True
        return cancel_event is not None and cancel_event.is_set()

    def _wait_for(self, future: Future, cancel_event: Optional[threading.Event]) -> bool:
        """Wait for ``future``; False if cancelled first."""
        while not future.done():
            if self._is_cancelled(cancel_event):
                return False
            wait([future], timeout=self.poll_interval)
        return not self._is_cancelled(cancel_event)

    def _select_sols(self, manifest: ImageManifest, sols_to_load: int) -> List[ManifestSol]:
        if sols_to_load < 0:
            raise ValueError(f"sols_to_load must be >= 0, got {sols_to_load}")

        manifest.validate_order()

        total = len(manifest.sols)
        if sols_to_load > total:
            logger.warning(
                f"Requested {sols_to_load} sols but manifest only lists {total}; loading all"
            )
            sols_to_load = total

        return manifest.latest_sols(sols_to_load)

    def _load_sol(self, entry: ManifestSol, future: "Future[SolCatalog]") -> SolOutcome:
        """Append one fetched sol to the cache, or record its failure."""
        try:
            catalog = future.result()
        except FetchError as e:
            logger.error(f"Error fetching url: {entry.catalog_url}: {e}")
            return SolOutcome(
                sol=entry.sol,
                catalog_url=entry.catalog_url,
                succeeded=False,
                error=str(e),
            )

        images = normalize_catalog(catalog)
        self.cache.append(images)

        logger.info(
            f"Found {len(images)}/{len(catalog.images)} full size images for sol {catalog.sol}"
        )
        return SolOutcome(
            sol=entry.sol,
            catalog_url=entry.catalog_url,
            succeeded=True,
            images_found=len(images),
            images_total=len(catalog.images),
        )

    def load_latest(
        self,
        manifest: ImageManifest,
        sols_to_load: int,
        cancel_event: Optional[threading.Event] = None,
    ) -> LoadReport:
        """
        Load the last ``sols_to_load`` sols of ``manifest`` into the cache.

        Parameters
        ----------
        manifest : ImageManifest
            Manifest with sols sorted oldest first
        sols_to_load : int
            Number of most recent sols to load. Larger than the manifest
            loads every sol.
        cancel_event : threading.Event, optional
            Setting this event cancels the load, like :meth:`cancel`

        Returns
        -------
        LoadReport
            One outcome per processed sol, in manifest order

        Raises
        ------
        ManifestOrderError
            If manifest sols are not in ascending order
        ValueError
            If ``sols_to_load`` is negative
        """
        try:
            return self._load(manifest, sols_to_load, cancel_event)
        finally:
            # cancel() applies to the load in progress or the next one, never both
            self._cancel_event.clear()

    def _load(
        self,
        manifest: ImageManifest,
        sols_to_load: int,
        cancel_event: Optional[threading.Event],
    ) -> LoadReport:
        selected = self._select_sols(manifest, sols_to_load)

        report = LoadReport(requested=len(selected))
        if not selected:
            logger.info("No sols selected, nothing to load")
            return report

        logger.info(
            f"Loading sols {selected[0].sol}-{selected[-1].sol} "
            f"({len(selected)} catalogs, {self.max_workers} workers)"
        )

        executor = ThreadPoolExecutor(max_workers=min(self.max_workers, len(selected)))
        try:
            futures: List[Tuple[ManifestSol, Future]] = [
                (entry, executor.submit(self.client.fetch_catalog, entry.catalog_url))
                for entry in selected
            ]

            with tqdm(
                total=len(selected), desc="Sols", unit="sol", disable=not self.show_progress
            ) as pbar:
                for entry, future in futures:
                    if not self._wait_for(future, cancel_event):
                        report.cancelled = True
                        break
                    outcome = self._load_sol(entry, future)
                    report.outcomes.append(outcome)
                    pbar.update(1)
                    pbar.set_postfix({"images": report.images_added})
        finally:
            # A cancelled load does not wait for in-flight fetches
            executor.shutdown(wait=not report.cancelled, cancel_futures=True)

        if report.cancelled:
            logger.warning(
                f"Load cancelled after {len(report.outcomes)}/{len(selected)} sols"
            )
        if report.failed_sols:
            logger.warning(
                f"Failed to load {len(report.failed_sols)} sols: {report.failed_sols}"
            )
        logger.info(
            f"Cached {report.images_added} images from "
            f"{len(report.succeeded_sols)}/{len(selected)} sols"
        )

        return report

    def close(self):
        """Close the client if this loader created it."""
        if self._owns_client:
            self.client.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()


def get_latest(count: int, cache: Optional[ImageCache] = None) -> ListOfImages:
    """
    Return the first ``count`` cached images.

    Raises
    ------
    InsufficientDataError
        If fewer than ``count`` images are cached
    """
    cache = cache if cache is not None else get_image_cache()
    return cache.latest(count)
