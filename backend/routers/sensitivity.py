"""
Sensitivity router: runs the free or advanced calculator for a device.

POST   /api/v1/sensitivity/                              calculate settings
GET    /api/v1/sensitivity/optimization/{session_id}     ramp status
DELETE /api/v1/sensitivity/optimization/{session_id}     restart the ramp

Which tier runs is the caller's decision (the request's `tier` field);
this router does not look at accounts or roles. The advanced tier reads
its temporal optimization factor from the caller's session; requests
without a session_id are computed as a first-day session.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from utils.device_catalog import get_device_info
from utils.optimization import OptimizationRegistry
from utils.sensitivity_calculator import (
    PROFILES,
    basic_device_summary,
    compute_breakdown,
    device_performance_tier,
)
from utils.sensitivity_models import (
    CalculatorTier,
    DeviceInfo,
    SensitivityBreakdown,
    SensitivitySettings,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/sensitivity", tags=["sensitivity"])

registry = OptimizationRegistry()


# ---------------------------------------------------------------------------
# Request / Response models
# ---------------------------------------------------------------------------

class SensitivityRequest(BaseModel):
    device_name: Optional[str] = Field(None, description="Catalog device name")
    device: Optional[DeviceInfo] = Field(None, description="Explicit specs (wins over device_name)")
    play_style: str = Field("balanced", description="aggressive/rusher, precise/sniper, balanced/versatile, defensive")
    experience_level: str = Field("intermediate", description="beginner .. professional (synonyms accepted)")
    tier: CalculatorTier = Field(CalculatorTier.free)
    session_id: Optional[str] = Field(None, description="Opaque per-user key for the optimization ramp")


class SensitivityResponse(BaseModel):
    device: DeviceInfo
    tier: CalculatorTier
    settings: SensitivitySettings
    breakdown: SensitivityBreakdown
    performance_tier: str
    device_summary: dict[str, str]
    notes: list[str]


class OptimizationStatus(BaseModel):
    session_id: str
    first_use_at: Optional[float] = None
    days_elapsed: int
    factor: float
    ramp_complete: bool


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("/", response_model=SensitivityResponse)
def calculate(req: SensitivityRequest):
    """
    Calculate in-game sensitivity values for a device.

    Device specs come from the request body or, failing that, the catalog.
    Unknown play styles / experience levels are accepted and treated as
    neutral (modifier 1.0).
    """
    device = _resolve_device(req)
    profile = PROFILES[req.tier]
    notes: list[str] = []

    context = None
    if profile.temporal_ramp:
        if req.session_id:
            context = registry.get(req.session_id)
        else:
            notes.append("No session_id: optimization ramp computed as day 0 (factor 1.0).")

    breakdown = compute_breakdown(
        device, req.play_style, req.experience_level, profile, context,
    )

    if breakdown.play_style.value == "unknown":
        notes.append(f"Unrecognised play style '{req.play_style}', using neutral modifier.")
    if breakdown.experience_level.value == "unknown":
        notes.append(f"Unrecognised experience level '{req.experience_level}', using neutral modifier.")

    logger.info(
        f"{req.tier.value} sensitivity for {device.name}: "
        f"general={breakdown.settings.general} bucket={breakdown.bucket.value}"
    )

    return SensitivityResponse(
        device=device,
        tier=req.tier,
        settings=breakdown.settings,
        breakdown=breakdown,
        performance_tier=device_performance_tier(device),
        device_summary=basic_device_summary(device),
        notes=notes,
    )


@router.get("/optimization/{session_id}", response_model=OptimizationStatus)
def get_optimization_status(session_id: str):
    """Current position on the 7-day optimization ramp for a session."""
    return OptimizationStatus(**registry.get(session_id).status())


@router.delete("/optimization/{session_id}", response_model=OptimizationStatus)
def reset_optimization(session_id: str):
    """Clear the session's cached factor and first-use timestamp, restarting the ramp."""
    registry.reset(session_id)
    logger.info(f"Optimization ramp reset for session {session_id}")
    return OptimizationStatus(**registry.get(session_id).status())


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _resolve_device(req: SensitivityRequest) -> DeviceInfo:
    if req.device is not None:
        return req.device
    if not req.device_name:
        raise HTTPException(status_code=422, detail="Provide either 'device' or 'device_name'.")
    device = get_device_info(req.device_name)
    if device is None:
        raise HTTPException(status_code=404, detail=f"Unknown device: {req.device_name}")
    return device
