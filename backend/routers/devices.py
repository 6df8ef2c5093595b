"""
Devices router: catalog lookup, search and side-by-side comparison.

Feeds the sensitivity calculator's device picker. All data comes from
utils.device_catalog.DEVICE_CATALOG; nothing here calls out to the network.
"""

import logging

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from utils.device_catalog import (
    SEARCH_LIMIT,
    calculate_device_score,
    get_device_info,
    get_devices_by_brand,
    search_devices,
)
from utils.sensitivity_calculator import classify_device, device_performance_tier
from utils.sensitivity_models import DeviceInfo

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/devices", tags=["devices"])


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------

class DeviceDetail(BaseModel):
    device: DeviceInfo
    bucket: str
    performance_tier: str
    device_score: int


class DeviceSearchResponse(BaseModel):
    query: str
    results: list[str]


class DeviceComparison(BaseModel):
    device_a: DeviceDetail
    device_b: DeviceDetail
    winner: str | None   # None on a tie
    score_delta: int


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/search", response_model=DeviceSearchResponse)
def search(
    q: str = Query(..., min_length=1, description="Substring of the device name"),
    limit: int = Query(SEARCH_LIMIT, ge=1, le=50),
):
    return DeviceSearchResponse(query=q, results=search_devices(q, limit=limit))


@router.get("/brand/{brand}", response_model=list[str])
def list_by_brand(brand: str):
    """All catalog devices for a brand (case-insensitive)."""
    return get_devices_by_brand(brand)


@router.get("/compare", response_model=DeviceComparison)
def compare(
    device_a: str = Query(..., description="First device name"),
    device_b: str = Query(..., description="Second device name"),
):
    """Compare two devices by weighted hardware score."""
    a = _detail(_lookup(device_a))
    b = _detail(_lookup(device_b))

    delta = a.device_score - b.device_score
    if delta > 0:
        winner = a.device.name
    elif delta < 0:
        winner = b.device.name
    else:
        winner = None

    return DeviceComparison(device_a=a, device_b=b, winner=winner, score_delta=abs(delta))


@router.get("/{device_name}", response_model=DeviceDetail)
def get_device(device_name: str):
    return _detail(_lookup(device_name))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _lookup(name: str) -> DeviceInfo:
    device = get_device_info(name)
    if device is None:
        logger.info(f"Device lookup miss: {name}")
        raise HTTPException(status_code=404, detail=f"Unknown device: {name}")
    return device


def _detail(device: DeviceInfo) -> DeviceDetail:
    return DeviceDetail(
        device=device,
        bucket=classify_device(device).value,
        performance_tier=device_performance_tier(device),
        device_score=calculate_device_score(device),
    )
