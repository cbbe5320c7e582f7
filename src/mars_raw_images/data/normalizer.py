"""Map raw catalog entries to cached image records."""

from typing import List, Optional

from mars_raw_images.data.models import MarsImage, SolCatalog, SolImage

THUMBNAIL_SAMPLE_TYPE = "thumbnail"


def is_thumbnail(entry: SolImage) -> bool:
    return entry.sample_type == THUMBNAIL_SAMPLE_TYPE


def normalize(entry: SolImage, sol: int) -> Optional[MarsImage]:
    """
    Convert a catalog entry into a ``MarsImage``.

    Parameters
    ----------
    entry : SolImage
        Raw catalog entry
    sol : int
        Sol of the enclosing catalog. The entry's own ``sol`` string is
        ignored.

    Returns
    -------
    MarsImage or None
        None for thumbnails
    """
    if is_thumbnail(entry):
        return None

    return MarsImage(
        item_name=entry.item_name,
        url=entry.url,
        instrument=entry.instrument,
        sol=sol,
        lmst=entry.lmst,
        utc=entry.utc,
    )


def normalize_catalog(catalog: SolCatalog) -> List[MarsImage]:
    """Normalize every full-size entry of ``catalog``, keeping catalog order."""
    images = []
    for entry in catalog.images:
        image = normalize(entry, catalog.sol)
        if image is not None:
            images.append(image)
    return images
