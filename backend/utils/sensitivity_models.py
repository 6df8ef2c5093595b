"""
Data model shared by the calculators, the device catalog and the routers.

DeviceInfo is deliberately permissive: no range checks on scores, sizes or
rates. The calculator saturates instead of rejecting.
"""

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class PlayStyle(str, Enum):
    aggressive = "aggressive"
    precise = "precise"
    balanced = "balanced"
    defensive = "defensive"
    unknown = "unknown"

    @classmethod
    def parse(cls, label: Optional[str]) -> "PlayStyle":
        """Map a free-form label (case-insensitive, synonyms allowed) to a variant."""
        if isinstance(label, cls):
            return label
        key = (label or "").strip().lower()
        return _PLAY_STYLE_ALIASES.get(key, cls.unknown)


class ExperienceLevel(str, Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"
    professional = "professional"
    unknown = "unknown"

    @classmethod
    def parse(cls, label: Optional[str]) -> "ExperienceLevel":
        """Map a free-form label (case-insensitive, synonyms allowed) to a variant."""
        if isinstance(label, cls):
            return label
        key = (label or "").strip().lower()
        return _EXPERIENCE_ALIASES.get(key, cls.unknown)


_PLAY_STYLE_ALIASES: dict[str, PlayStyle] = {
    "aggressive": PlayStyle.aggressive,
    "rusher": PlayStyle.aggressive,
    "precise": PlayStyle.precise,
    "sniper": PlayStyle.precise,
    "balanced": PlayStyle.balanced,
    "versatile": PlayStyle.balanced,
    "defensive": PlayStyle.defensive,
}

_EXPERIENCE_ALIASES: dict[str, ExperienceLevel] = {
    "beginner": ExperienceLevel.beginner,
    "novice": ExperienceLevel.beginner,
    "intermediate": ExperienceLevel.intermediate,
    "casual": ExperienceLevel.intermediate,
    "advanced": ExperienceLevel.advanced,
    "experienced": ExperienceLevel.advanced,
    "professional": ExperienceLevel.professional,
    "expert": ExperienceLevel.professional,
}


class DeviceBucket(str, Enum):
    apple = "apple"
    samsung = "samsung"
    google = "google"
    oneplus = "oneplus"
    xiaomi = "xiaomi"
    oppo = "oppo"
    vivo = "vivo"
    huawei = "huawei"
    realme = "realme"
    asus = "asus"
    sony = "sony"
    android = "android"  # generic fallback


class CalculatorTier(str, Enum):
    free = "free"
    advanced = "advanced"


# ---------------------------------------------------------------------------
# Input / output records
# ---------------------------------------------------------------------------

class DeviceInfo(BaseModel):
    name: str
    brand: Optional[str] = None
    device_type: Literal["phone", "tablet"] = "phone"
    screen_size: float = Field(..., description="Diagonal in inches")
    refresh_rate: int = Field(60, description="Display refresh rate (Hz)")
    touch_sampling_rate: int = Field(0, description="Touch sampling rate (Hz)")
    processor_score: float = Field(..., description="0-100, clamped by the calculator")
    gpu_score: float = Field(..., description="0-100, clamped by the calculator")
    ram: Optional[float] = Field(None, description="RAM in GB")
    release_year: Optional[int] = None


class SensitivitySettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    general: int
    red_dot: int
    scope_2x: int
    scope_4x: int
    sniper_scope: int
    free_look: int


class CalculatorProfile(BaseModel):
    """Switches that turn the shared pipeline into one calculator tier."""

    model_config = ConfigDict(frozen=True)

    tier: CalculatorTier
    detailed_brands: bool
    apple_pro_by_processor: bool
    performance_steps: tuple[tuple[str, float, float], ...]
    ram_factor: bool
    age_factor: bool
    brand_factor: bool
    asus_floor: bool
    temporal_ramp: bool
    basic_optimization: float = 1.0
    tier_optimization: bool = False
    free_brand_modifier: bool = False
    complex_factor: bool = False


class SensitivityBreakdown(BaseModel):
    """Intermediate values of one calculation, for transparency."""

    model_config = ConfigDict(frozen=True)

    tier: CalculatorTier
    bucket: DeviceBucket
    high_end: bool
    play_style: PlayStyle
    experience_level: ExperienceLevel
    base_value: int
    play_style_modifier: float
    experience_modifier: float
    optimization_factor: float
    tier_factor: float
    general_raw: float
    scope_ratios: dict[str, float]
    settings: SensitivitySettings
