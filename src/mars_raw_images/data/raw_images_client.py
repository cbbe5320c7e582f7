"""
Client for the MSL raw-image service.

The service publishes a top-level image manifest listing every sol and the
URL of that sol's image catalog. This module fetches and decodes both.
"""

import logging
from typing import Any, Optional

import requests

from mars_raw_images.data.models import ImageManifest, SolCatalog
from mars_raw_images.exceptions import DecodeError, TransportError
from mars_raw_images.utils.config import get_config

logger = logging.getLogger(__name__)


class RawImagesClient:
    """
    Client for the raw-image manifest and sol catalogs.

    Every request is a single GET bounded by ``timeout``. Failed requests are
    not retried.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize client.

        Parameters
        ----------
        timeout : float, optional
            Request timeout in seconds. Defaults to MARS_IMAGES_TIMEOUT.
        session : requests.Session, optional
            Session for connection reuse. A new one is created if omitted.
        """
        self.timeout = timeout if timeout is not None else get_config().request_timeout
        self.session = session or requests.Session()

        logger.debug(f"Initialized raw images client (timeout={self.timeout}s)")

    def _get_json(self, url: str, timeout: Optional[float] = None) -> Any:
        """
        GET ``url`` and decode the JSON body.

        Raises
        ------
        TransportError
            If the request cannot be built, sent, or returns an error status
        DecodeError
            If the body is not valid JSON
        """
        timeout = self.timeout if timeout is None else timeout
        logger.debug(f"GET {url} (timeout={timeout}s)")

        try:
            response = self.session.get(url, timeout=timeout)
        except (
            requests.exceptions.MissingSchema,
            requests.exceptions.InvalidSchema,
            requests.exceptions.InvalidURL,
        ) as e:
            logger.error(f"Error building http request for {url}: {e}")
            raise TransportError("Error building http request", url, e) from e
        except requests.RequestException as e:
            logger.error(f"Error making client request to {url}: {e}")
            raise TransportError("Error making client request", url, e) from e

        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            logger.error(f"HTTP error for {url}: {e}")
            raise TransportError(f"HTTP {response.status_code}", url, e) from e

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Error decoding JSON response for url: {url}")
            raise DecodeError("Error decoding JSON response", url, e) from e

    def fetch_manifest(self, base_url: str, timeout: Optional[float] = None) -> ImageManifest:
        """
        Download and decode the image manifest.

        Parameters
        ----------
        base_url : str
            Manifest URL
        timeout : float, optional
            Overrides the client timeout for this request

        Returns
        -------
        ImageManifest
            Decoded manifest

        Raises
        ------
        TransportError
            If the manifest could not be retrieved
        DecodeError
            If the body does not match the manifest shape
        """
        data = self._get_json(base_url, timeout=timeout)
        try:
            manifest = ImageManifest.from_dict(data)
        except ValueError as e:
            logger.error(f"Unexpected manifest shape at {base_url}: {e}")
            raise DecodeError("Unexpected manifest shape", base_url, e) from e

        logger.info(
            f"Fetched manifest: {len(manifest.sols)} sols, "
            f"latest sol {manifest.latest_sol}, {manifest.num_images} images"
        )
        return manifest

    def fetch_catalog(self, catalog_url: str, timeout: Optional[float] = None) -> SolCatalog:
        """
        Download and decode one sol's image catalog.

        Same failure semantics as :meth:`fetch_manifest`.
        """
        data = self._get_json(catalog_url, timeout=timeout)
        try:
            catalog = SolCatalog.from_dict(data)
        except ValueError as e:
            logger.error(f"Unexpected catalog shape at {catalog_url}: {e}")
            raise DecodeError("Unexpected catalog shape", catalog_url, e) from e

        logger.debug(f"Fetched catalog for sol {catalog.sol}: {len(catalog.images)} entries")
        return catalog

    def close(self):
        """Close the session."""
        self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()


def fetch_manifest(base_url: str, timeout: Optional[float] = None) -> ImageManifest:
    """Fetch the manifest at ``base_url`` with a short-lived client."""
    with RawImagesClient(timeout=timeout) as client:
        return client.fetch_manifest(base_url)


def fetch_catalog(catalog_url: str, timeout: Optional[float] = None) -> SolCatalog:
    """Fetch the catalog at ``catalog_url`` with a short-lived client."""
    with RawImagesClient(timeout=timeout) as client:
        return client.fetch_catalog(catalog_url)
