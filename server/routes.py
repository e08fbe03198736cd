"""
Map API routes.

This module contains endpoints for the map configuration, server-side
clustering and PNG snapshots of the clustered pins, plus small helpers used by
the client (version, random display names).

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-17
"""

import json
import logging
import os
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import Pin, get_db
from logic.clustering import ClusterSource
from logic.config import load_config
from logic.map_controller import MapController
from logic.names import generate_random_name
from logic.projection import from_lon_lat, resolution_for_zoom, to_lon_lat
from logic.render import render_features_to_image
from logic.styles import StyleResolver
from server.schemas import ClustersResponse

logger = logging.getLogger(__name__)

router = APIRouter()

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
VERSION_PATH = os.path.join(BASE_DIR, "version.json")
DEFAULT_VERSION = "0.1.0"

MAX_IMAGE_SIDE = 2048


def _all_pins(db: Session):
    try:
        return [pin.to_dict() for pin in db.query(Pin).order_by(Pin.created_at).all()]
    except SQLAlchemyError:
        logger.exception("Error fetching pins")
        raise HTTPException(500, "Failed to fetch pins")


@router.get("/api/version")
def get_version():
    """Get the application version.

    Returns:
        Dictionary with version string.
    """
    try:
        with open(VERSION_PATH, "r", encoding="utf-8") as f:
            version_data = json.load(f)
        return version_data
    except (FileNotFoundError, json.JSONDecodeError):
        return {"version": DEFAULT_VERSION}


@router.get("/api/map")
def get_map():
    """Get the map configuration (initial view, clustering, tile sources).

    Returns:
        Map configuration dictionary.
    """
    return load_config()


@router.get("/api/names/random")
def random_name():
    """Suggest a display name for visitors who have not picked one.

    Returns:
        Dictionary with a ``name`` such as "Clever Otter".
    """
    return {"name": generate_random_name()}


@router.get("/api/clusters", response_model=ClustersResponse)
def get_clusters(
    zoom: float = Query(..., ge=0, le=28),
    selected: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Cluster all pins for a zoom level.

    Args:
        zoom: Zoom level to cluster at.
        selected: Selected pin id, used for styling.

    Returns:
        Clusters with position, member pin ids and resolved style.
    """
    config = load_config()
    source = ClusterSource(
        distance=config["clustering"]["distance"],
        min_distance=config["clustering"]["min_distance"],
    )
    source.set_pins(_all_pins(db))
    resolution = resolution_for_zoom(zoom)
    resolver = StyleResolver()

    clusters = []
    for cluster in source.get_clusters(resolution):
        lng, lat = to_lon_lat(*cluster.coordinate)
        clusters.append(
            {
                "lat": lat,
                "lng": lng,
                "size": cluster.size,
                "pinIds": [pin["id"] for pin in cluster.pins],
                "style": resolver.resolve(cluster, selected).to_dict(),
            }
        )

    return {"zoom": zoom, "resolution": resolution, "selected": selected, "clusters": clusters}


@router.get("/api/map/render.png")
def render_map(
    zoom: Optional[float] = Query(None, ge=0, le=28),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    width: int = Query(800, ge=1, le=MAX_IMAGE_SIDE),
    height: int = Query(600, ge=1, le=MAX_IMAGE_SIDE),
    selected: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Render the clustered pins of a map view to a PNG.

    Args:
        zoom: Zoom level; defaults to the configured initial zoom.
        lat: View center latitude; defaults to the configured center.
        lng: View center longitude; defaults to the configured center.
        width: Image width in pixels.
        height: Image height in pixels.
        selected: Pin id drawn as selected.

    Returns:
        PNG image with content-type image/png.
    """
    controller = MapController(config=load_config(), size=(width, height))
    try:
        controller.set_pins(_all_pins(db))
        controller.set_selected_pin(selected)

        config_lng, config_lat = controller.config["initial_center"]
        center = from_lon_lat(config_lng if lng is None else lng, config_lat if lat is None else lat)
        target_zoom = controller.config["initial_zoom"] if zoom is None else zoom
        controller.view.animate(center, target_zoom, 0)

        png = render_features_to_image(controller.render(), (width, height))
    finally:
        controller.teardown()

    return Response(content=png, media_type="image/png")
