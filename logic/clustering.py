"""
Pin clustering.

Groups pins that sit close together on screen into cluster features. The
grouping is greedy: pins are visited in insertion order and each pin that is
not yet part of a cluster opens a square search window of
``distance * resolution`` map units around itself; every unclustered pin in
that window joins it. Pins are therefore partitioned: each pin ends up in
exactly one cluster per pass.

The neighbour search uses a KD-tree with the Chebyshev metric, which matches
the square search window exactly.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-18
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np
from scipy.spatial import cKDTree

from logic.projection import (
    Coordinate,
    Extent,
    buffer_coordinate,
    extent_from_coordinates,
    from_lon_lat,
    get_center,
)

logger = logging.getLogger(__name__)

DEFAULT_DISTANCE = 40
DEFAULT_MIN_DISTANCE = 20


@dataclass(frozen=True)
class PointFeature:
    """A pin placed on the map.

    Attributes:
        pin: Pin data as returned by the API.
        coordinate: Projected (x, y) position.
    """

    pin: Dict[str, Any]
    coordinate: Coordinate

    @classmethod
    def from_pin(cls, pin: Dict[str, Any]) -> "PointFeature":
        return cls(pin=pin, coordinate=from_lon_lat(float(pin["lng"]), float(pin["lat"])))


@dataclass
class ClusterFeature:
    """A rendered group of one or more pins.

    Attributes:
        features: Member point features.
        coordinate: Where the cluster marker is drawn.
    """

    features: List[PointFeature] = field(default_factory=list)
    coordinate: Coordinate = (0.0, 0.0)

    @property
    def size(self) -> int:
        return len(self.features)

    @property
    def is_cluster(self) -> bool:
        return self.size > 1

    @property
    def pins(self) -> List[Dict[str, Any]]:
        return [f.pin for f in self.features]

    def extent(self) -> Extent:
        """Bounding extent of the member positions."""
        return extent_from_coordinates([f.coordinate for f in self.features])


class ClusterSource:
    """Clusters a pin collection for a given resolution.

    Results are cached per resolution. Replacing the pins through
    :meth:`set_pins` clears the cache; anything else that changes how
    clusters should render (such as the selected pin) must call
    :meth:`refresh`.
    """

    def __init__(self, distance: float = DEFAULT_DISTANCE, min_distance: float = DEFAULT_MIN_DISTANCE):
        if distance < 0 or min_distance < 0:
            raise ValueError("Cluster distances must not be negative")
        self.distance = distance
        self.min_distance = min_distance
        self._features: List[PointFeature] = []
        self._tree: Optional[cKDTree] = None
        self._resolution: Optional[float] = None
        self._clusters: List[ClusterFeature] = []
        self.revision = 0

    @property
    def interpolation_ratio(self) -> float:
        """How far cluster markers are pulled from the centroid toward the search center."""
        if self.min_distance > 0 and self.distance > 0:
            return min(self.min_distance, self.distance) / self.distance
        return 0.0

    def set_pins(self, pins: List[Dict[str, Any]]) -> None:
        """Replace the clustered pin collection.

        Args:
            pins: Pin dictionaries with at least ``lat`` and ``lng``.
        """
        self._features = [PointFeature.from_pin(pin) for pin in pins]
        if self._features:
            self._tree = cKDTree(np.array([f.coordinate for f in self._features], dtype=float))
        else:
            self._tree = None
        self.refresh()

    @property
    def features(self) -> List[PointFeature]:
        return list(self._features)

    def refresh(self) -> None:
        """Drop cached clusters so the next request recomputes them."""
        self._resolution = None
        self._clusters = []
        self.revision += 1

    def get_clusters(self, resolution: float) -> List[ClusterFeature]:
        """Clusters for the given resolution, recomputed only when it changes.

        Args:
            resolution: Map units per pixel.

        Returns:
            Cluster features covering every pin exactly once.
        """
        if resolution <= 0:
            raise ValueError("Resolution must be positive")
        if self._resolution != resolution:
            self._clusters = self._cluster(resolution)
            self._resolution = resolution
            logger.debug(
                "Clustered %d pins into %d features at resolution %.4f",
                len(self._features),
                len(self._clusters),
                resolution,
            )
        return self._clusters

    def _cluster(self, resolution: float) -> List[ClusterFeature]:
        if self._tree is None:
            return []

        map_distance = self.distance * resolution
        clustered = np.zeros(len(self._features), dtype=bool)
        clusters: List[ClusterFeature] = []

        for index, feature in enumerate(self._features):
            if clustered[index]:
                continue
            neighbours = self._tree.query_ball_point(feature.coordinate, r=map_distance, p=np.inf)
            members = [i for i in sorted(neighbours) if not clustered[i]]
            clustered[members] = True
            search_extent = buffer_coordinate(feature.coordinate, map_distance)
            clusters.append(self._create_cluster([self._features[i] for i in members], search_extent))

        return clusters

    def _create_cluster(self, members: List[PointFeature], search_extent: Extent) -> ClusterFeature:
        xs = [m.coordinate[0] for m in members]
        ys = [m.coordinate[1] for m in members]
        centroid = (sum(xs) / len(xs), sum(ys) / len(ys))
        search_center = get_center(search_extent)
        ratio = self.interpolation_ratio
        coordinate = (
            centroid[0] * (1 - ratio) + search_center[0] * ratio,
            centroid[1] * (1 - ratio) + search_center[1] * ratio,
        )
        return ClusterFeature(features=members, coordinate=coordinate)


def cluster_pins(
    pins: List[Dict[str, Any]],
    resolution: float,
    distance: float = DEFAULT_DISTANCE,
    min_distance: float = DEFAULT_MIN_DISTANCE,
) -> List[ClusterFeature]:
    """One-shot clustering of ``pins`` at ``resolution``."""
    source = ClusterSource(distance=distance, min_distance=min_distance)
    source.set_pins(pins)
    return source.get_clusters(resolution)
