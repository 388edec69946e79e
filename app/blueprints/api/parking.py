"""Parking API
==============

Slot occupancy and occupancy statistics.

Routes:
    GET  /api/spots        All parking slots
    POST /api/update-spot  Occupy or release a slot
    GET  /api/stats        Occupancy statistics (?range=daily|weekly|monthly)
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response, request

from app.blueprints.api._common import client_address, get_container, parse_body, success
from app.schemas.parking import SpotUpdateRequest
from app.security.auth import current_username
from app.utils.http import safe_route

logger = logging.getLogger(__name__)

parking_api = Blueprint("parking_api", __name__)

ANONYMOUS_OPERATOR = "Unknown Admin"


@parking_api.get("/spots")
@safe_route("Failed to load parking spots")
def list_spots() -> Response:
    spots = get_container().parking_service.list_spots()
    return success([spot.to_dict() for spot in spots])


@parking_api.post("/update-spot")
@safe_route("Failed to update parking spot")
def update_spot() -> Response:
    body = parse_body(SpotUpdateRequest)
    slot = get_container().parking_service.update_spot(
        body.slot_id,
        body.status,
        body.plate_number,
        body.park_time,
        body.vehicle_type,
        actor=current_username() or ANONYMOUS_OPERATOR,
        source_address=client_address(),
    )
    return success(slot.to_dict(), message="Spot updated")


@parking_api.get("/stats")
@safe_route("Failed to compute occupancy statistics")
def occupancy_stats() -> Response:
    range_name = request.args.get("range", "daily").strip().lower()
    return success(get_container().parking_service.occupancy_stats(range_name))
