"""
Data structures for the MSL raw-image manifest, sol catalogs and the
normalized image records kept in the cache.

Field names follow Python conventions; ``from_dict``/``to_dict`` translate
to and from the JSON names used by the remote service.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from mars_raw_images.exceptions import ManifestOrderError


def _require(data: Dict[str, Any], key: str, kind: type, where: str) -> Any:
    """Fetch a required key from a decoded JSON object and check its type."""
    if key not in data:
        raise ValueError(f"{where}: missing required field '{key}'")
    value = data[key]
    # bool is an int subclass, but never a valid count or sol
    if isinstance(value, bool) or not isinstance(value, kind):
        raise ValueError(
            f"{where}: field '{key}' should be {kind.__name__}, got {type(value).__name__}"
        )
    return value


def _optional_str(data: Dict[str, Any], key: str, where: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    if not isinstance(value, str):
        raise ValueError(
            f"{where}: field '{key}' should be str, got {type(value).__name__}"
        )
    return value


def _require_object(data: Any, where: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ValueError(f"{where}: expected a JSON object, got {type(data).__name__}")
    return data


@dataclass(frozen=True)
class ManifestSol:
    """One sol entry of the image manifest."""

    sol: int
    num_images: int
    catalog_url: str
    last_updated: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "ManifestSol":
        data = _require_object(data, "manifest sol")
        return cls(
            sol=_require(data, "sol", int, "manifest sol"),
            num_images=_require(data, "num_images", int, "manifest sol"),
            catalog_url=_require(data, "catalog_url", str, "manifest sol"),
            last_updated=_optional_str(data, "last_updated", "manifest sol"),
        )


@dataclass(frozen=True)
class ImageManifest:
    """
    Snapshot of everything the remote service reports as available.

    Attributes
    ----------
    latest_sol : int
        Most recent sol with images
    sols : list of ManifestSol
        Per-sol entries, expected oldest first
    num_images : int
        Total number of images across all sols
    """

    latest_sol: int
    sols: List[ManifestSol] = field(default_factory=list)
    num_images: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> "ImageManifest":
        data = _require_object(data, "manifest")
        raw_sols = _require(data, "sols", list, "manifest")
        return cls(
            latest_sol=_require(data, "latest_sol", int, "manifest"),
            sols=[ManifestSol.from_dict(entry) for entry in raw_sols],
            num_images=_require(data, "num_images", int, "manifest"),
        )

    def validate_order(self) -> None:
        """
        Check that sols are strictly ascending.

        Raises
        ------
        ManifestOrderError
            If a sol is not greater than the one before it
        """
        for previous, current in zip(self.sols, self.sols[1:]):
            if current.sol <= previous.sol:
                raise ManifestOrderError(previous.sol, current.sol)

    def latest_sols(self, count: int) -> List[ManifestSol]:
        """Return the last ``count`` sol entries in manifest order."""
        if count <= 0:
            return []
        return list(self.sols[-count:])


@dataclass(frozen=True)
class SolImage:
    """Raw catalog entry. ``sol`` is kept as the string the service sends."""

    sol: str
    instrument: str
    url: str
    lmst: str
    utc: str
    sample_type: str
    item_name: str

    @classmethod
    def from_dict(cls, data: Any) -> "SolImage":
        data = _require_object(data, "catalog image")
        return cls(
            sol=_optional_str(data, "sol", "catalog image"),
            instrument=_optional_str(data, "instrument", "catalog image"),
            url=_optional_str(data, "urlList", "catalog image"),
            lmst=_optional_str(data, "lmst", "catalog image"),
            utc=_optional_str(data, "utc", "catalog image"),
            sample_type=_optional_str(data, "sampleType", "catalog image"),
            item_name=_optional_str(data, "itemName", "catalog image"),
        )


@dataclass(frozen=True)
class SolCatalog:
    """Image entries belonging to one sol."""

    sol: int
    images: List[SolImage] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "SolCatalog":
        data = _require_object(data, "catalog")
        raw_images = _require(data, "images", list, "catalog")
        return cls(
            sol=_require(data, "sol", int, "catalog"),
            images=[SolImage.from_dict(entry) for entry in raw_images],
        )


@dataclass(frozen=True)
class MarsImage:
    """Normalized full-size image record."""

    item_name: str
    url: str
    instrument: str
    sol: int
    lmst: str
    utc: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "itemName": self.item_name,
            "url": self.url,
            "instrument": self.instrument,
            "sol": self.sol,
            "lmst": self.lmst,
            "utc": self.utc,
        }


@dataclass
class ListOfImages:
    """Read surface of the cache, serialized as ``{"images": [...]}``."""

    images: List[MarsImage] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.images)

    def to_dict(self) -> Dict[str, Any]:
        return {"images": [image.to_dict() for image in self.images]}


@dataclass
class SolOutcome:
    """Result of loading one sol's catalog."""

    sol: int
    catalog_url: str
    succeeded: bool
    images_found: int = 0
    images_total: int = 0
    error: Optional[str] = None


@dataclass
class LoadReport:
    """
    Per-sol outcomes of a ``CacheLoader.load_latest`` call, in manifest order.

    ``requested`` is the size of the selected window; when the load is
    cancelled ``outcomes`` only covers the sols processed before that.
    """

    outcomes: List[SolOutcome] = field(default_factory=list)
    requested: int = 0
    cancelled: bool = False

    @property
    def success(self) -> bool:
        # Failed sols are reported per outcome, they don't fail the load
        return not self.cancelled

    @property
    def succeeded_sols(self) -> List[int]:
        return [o.sol for o in self.outcomes if o.succeeded]

    @property
    def failed_sols(self) -> List[int]:
        return [o.sol for o in self.outcomes if not o.succeeded]

    @property
    def images_added(self) -> int:
        return sum(o.images_found for o in self.outcomes if o.succeeded)

    def summary(self) -> Dict[str, Any]:
        return {
            "sols_requested": self.requested,
            "sols_loaded": len(self.succeeded_sols),
            "sols_failed": len(self.failed_sols),
            "images_added": self.images_added,
            "cancelled": self.cancelled,
        }
