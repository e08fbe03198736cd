"""
Pin and comment API routes.

This module contains endpoints for listing, reading and creating pins and for
adding comments to a pin. Pins and comments cannot be edited or deleted.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-17
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import COORDINATE_SCALE, Comment, Pin, get_db
from logic.validation import validate_comment_payload, validate_pin_payload
from server.broadcast import notify_comment_created, notify_pin_created
from server.schemas import CommentOut, PinDetail, PinOut

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/pins", response_model=List[PinOut])
async def list_pins(db: Session = Depends(get_db)):
    """List every pin.

    Returns:
        List of pin dictionaries.

    Raises:
        HTTPException: 500 if the database cannot be read.
    """
    try:
        pins = db.query(Pin).order_by(Pin.created_at.desc()).all()
    except SQLAlchemyError:
        logger.exception("Error fetching pins")
        raise HTTPException(500, "Failed to fetch pins")
    return [pin.to_dict() for pin in pins]


@router.get("/api/pins/{pin_id}", response_model=PinDetail)
async def get_pin(pin_id: str, db: Session = Depends(get_db)):
    """Get a single pin with its comments, newest first.

    Args:
        pin_id: Pin id.

    Returns:
        Pin dictionary with a ``comments`` list.

    Raises:
        HTTPException: 404 if the pin does not exist, 500 on database errors.
    """
    try:
        pin = db.get(Pin, pin_id)
        if pin is None:
            raise HTTPException(404, "Pin not found")
        comments = [comment.to_dict() for comment in pin.comments]
    except SQLAlchemyError:
        logger.exception("Error fetching pin %s", pin_id)
        raise HTTPException(500, "Failed to fetch pin")

    data = pin.to_dict()
    data["comments"] = comments
    return data


@router.post("/api/pins", status_code=201, response_model=PinOut)
async def create_pin(payload: Optional[Dict[str, Any]] = Body(None), db: Session = Depends(get_db)):
    """Create a pin.

    Args:
        payload: Dictionary with lat, lng, title, description and authorName.

    Returns:
        The created pin.

    Raises:
        HTTPException: 400 on missing or invalid fields, 500 on database errors.
    """
    values = validate_pin_payload(payload or {})
    values["lat"] = round(values["lat"], COORDINATE_SCALE)
    values["lng"] = round(values["lng"], COORDINATE_SCALE)

    try:
        pin = Pin(**values)
        db.add(pin)
        db.commit()
        db.refresh(pin)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error creating pin")
        raise HTTPException(500, "Failed to create pin")

    data = pin.to_dict()
    logger.info("Created pin %s at (%s, %s)", pin.id, data["lat"], data["lng"])
    await notify_pin_created(data)
    return data


@router.post("/api/pins/{pin_id}/comments", status_code=201, response_model=CommentOut)
async def create_comment(
    pin_id: str,
    payload: Optional[Dict[str, Any]] = Body(None),
    db: Session = Depends(get_db),
):
    """Add a comment to a pin.

    Args:
        pin_id: Pin to comment on.
        payload: Dictionary with authorName and content.

    Returns:
        The created comment.

    Raises:
        HTTPException: 400 on missing fields, 404 if the pin does not exist,
            500 on database errors.
    """
    values = validate_comment_payload(payload or {})

    try:
        if db.get(Pin, pin_id) is None:
            raise HTTPException(404, "Pin not found")

        comment = Comment(pin_id=pin_id, **values)
        db.add(comment)
        db.commit()
        db.refresh(comment)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error creating comment on pin %s", pin_id)
        raise HTTPException(500, "Failed to create comment")

    data = comment.to_dict()
    logger.info("Created comment %s on pin %s", comment.id, pin_id)
    await notify_comment_created(data)
    return data
