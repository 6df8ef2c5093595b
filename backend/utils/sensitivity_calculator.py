"""
Sensitivity calculation engine.

Pipeline (pure, synchronous):
    classify_device -> estimate_base_value
        x play_style_modifier x experience_modifier x optimization factor
        x tier-specific extras (free tier only)
    -> derive_scope_values -> clamp_settings

Both calculator tiers run through the same functions; a CalculatorProfile
switches the optional factors on and off. Numeric input is never rejected:
non-finite values fall back to neutral defaults and every output saturates
at its bounds.
"""

import logging
import math
from typing import Optional

from utils.optimization import OptimizationContext
from utils.sensitivity_models import (
    CalculatorProfile,
    CalculatorTier,
    DeviceBucket,
    DeviceInfo,
    ExperienceLevel,
    PlayStyle,
    SensitivityBreakdown,
    SensitivitySettings,
)
from utils.sensitivity_weights import (
    ADVANCED_PERFORMANCE_STEPS,
    AGE_MAX_YEARS,
    AGE_STEP_FACTOR,
    ANDROID_BRAND_TOKENS,
    APPLE_PRO_BASE,
    APPLE_PRO_PROCESSOR_SCORE,
    APPLE_SCOPE_RATIOS,
    APPLE_STANDARD_BASE,
    APPLE_TABLET_BASE,
    ASUS_BASE_MIN,
    BASE_MAX,
    BASE_MIN,
    BRAND_FACTORS,
    COMPLEX_LARGE_SCREEN_FACTOR,
    COMPLEX_LARGE_SCREEN_IN,
    COMPLEX_LOW_PROCESSOR,
    COMPLEX_LOW_PROCESSOR_FACTOR,
    COMPLEX_SMALL_SCREEN_FACTOR,
    COMPLEX_SMALL_SCREEN_IN,
    COMPLEX_TOP_PROCESSOR,
    COMPLEX_TOP_PROCESSOR_FACTOR,
    DEFAULT_SCOPE_RATIOS,
    EXPERIENCE_MODIFIERS,
    FREE_APPLE_OPTIMIZATION,
    FREE_BASIC_OPTIMIZATION,
    FREE_ENHANCED_THRESHOLD,
    FREE_GAMING_MODIFIER,
    FREE_GAMING_TOKENS,
    FREE_PERFORMANCE_OPTIMIZATION,
    FREE_PERFORMANCE_STEPS,
    HIGH_END_PERFORMANCE,
    HIGH_END_SCOPE_RATIOS,
    NOMINAL_BASE,
    PERFORMANCE_TIER_LIMITS,
    PLAY_STYLE_MODIFIERS,
    RAM_FACTOR_CAP,
    RAM_STEP_FACTOR,
    REFERENCE_RAM_GB,
    REFERENCE_REFRESH_HZ,
    REFERENCE_RELEASE_YEAR,
    REFERENCE_SCREEN_IN,
    REFRESH_LOG_WEIGHT,
    SCREEN_STEP_FACTOR,
    SCREEN_STEP_IN,
    SETTING_BOUNDS,
)

logger = logging.getLogger(__name__)

SCOPE_FIELDS = ("red_dot", "scope_2x", "scope_4x", "sniper_scope", "free_look")

FREE_PROFILE = CalculatorProfile(
    tier=CalculatorTier.free,
    detailed_brands=False,
    apple_pro_by_processor=False,
    performance_steps=FREE_PERFORMANCE_STEPS,
    ram_factor=False,
    age_factor=False,
    brand_factor=False,
    asus_floor=False,
    temporal_ramp=False,
    basic_optimization=FREE_BASIC_OPTIMIZATION,
    tier_optimization=True,
    free_brand_modifier=True,
    complex_factor=True,
)

ADVANCED_PROFILE = CalculatorProfile(
    tier=CalculatorTier.advanced,
    detailed_brands=True,
    apple_pro_by_processor=True,
    performance_steps=ADVANCED_PERFORMANCE_STEPS,
    ram_factor=True,
    age_factor=True,
    brand_factor=True,
    asus_floor=True,
    temporal_ramp=True,
)

PROFILES: dict[CalculatorTier, CalculatorProfile] = {
    CalculatorTier.free: FREE_PROFILE,
    CalculatorTier.advanced: ADVANCED_PROFILE,
}


# ---------------------------------------------------------------------------
# Input hygiene
# ---------------------------------------------------------------------------

def _finite(value: Optional[float], default: Optional[float]) -> Optional[float]:
    """Return *value* unless it is missing or NaN/inf."""
    if value is None:
        return default
    try:
        value = float(value)
    except (TypeError, ValueError):
        return default
    return value if math.isfinite(value) else default


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _score(value: Optional[float]) -> float:
    """Clamp a 0-100 score. Infinite values saturate; NaN counts as 0."""
    if value is None or math.isnan(value):
        return 0.0
    return _clamp(float(value), 0.0, 100.0)


def _scores(device: DeviceInfo) -> tuple[float, float]:
    return _score(device.processor_score), _score(device.gpu_score)


def performance_score(device: DeviceInfo) -> float:
    """Mean of the clamped processor and GPU scores."""
    processor, gpu = _scores(device)
    return (processor + gpu) / 2


def _step_factor(score: float, steps) -> float:
    for op, threshold, factor in steps:
        if op == "lt" and score < threshold:
            return factor
        if op == "gt" and score > threshold:
            return factor
    return 1.0


# ---------------------------------------------------------------------------
# Device classifier
# ---------------------------------------------------------------------------

def classify_device(device: DeviceInfo, detailed: bool = True) -> DeviceBucket:
    """
    Sort a device into a platform/brand bucket.

    Apple wins over any brand string. With detailed=False only apple vs
    generic android is distinguished (free tier).
    """
    name = (device.name or "").lower()
    brand = (device.brand or "").lower()

    if brand == "apple" or "iphone" in name or "ipad" in name:
        return DeviceBucket.apple

    if detailed:
        for token in ANDROID_BRAND_TOKENS:
            if token in brand or token in name:
                return DeviceBucket(token)

    return DeviceBucket.android


# ---------------------------------------------------------------------------
# Base value estimator
# ---------------------------------------------------------------------------

def _apple_base(device: DeviceInfo, profile: CalculatorProfile) -> int:
    name = (device.name or "").lower()
    if "ipad" in name:
        return APPLE_TABLET_BASE
    processor, _ = _scores(device)
    if "pro" in name or (profile.apple_pro_by_processor and processor > APPLE_PRO_PROCESSOR_SCORE):
        return APPLE_PRO_BASE
    return APPLE_STANDARD_BASE


def screen_size_factor(screen_size: float) -> float:
    size = _finite(screen_size, REFERENCE_SCREEN_IN)
    steps = max(0.0, (size - REFERENCE_SCREEN_IN) / SCREEN_STEP_IN)
    return SCREEN_STEP_FACTOR ** steps


def refresh_rate_factor(refresh_rate: float) -> float:
    rate = _finite(refresh_rate, REFERENCE_REFRESH_HZ)
    rate = max(REFERENCE_REFRESH_HZ, rate)
    return 1 + REFRESH_LOG_WEIGHT * math.log10(rate / REFERENCE_REFRESH_HZ)


def ram_factor(ram: Optional[float]) -> float:
    """Absent RAM is neutral. The exponent is capped so the power cannot overflow."""
    gb = _finite(ram, None)
    if not gb:
        return 1.0
    exponent = min(max(0.0, gb - REFERENCE_RAM_GB), 10.0)
    return min(RAM_FACTOR_CAP, RAM_STEP_FACTOR ** exponent)


def age_factor(release_year: Optional[int]) -> float:
    year = _finite(release_year, None)
    if year is None:
        return 1.0
    years = _clamp(year - REFERENCE_RELEASE_YEAR, 0, AGE_MAX_YEARS)
    return AGE_STEP_FACTOR ** years


def estimate_base_value(
    device: DeviceInfo,
    bucket: DeviceBucket,
    profile: CalculatorProfile,
) -> int:
    """
    Nominal general sensitivity for a device before user modifiers.

    Apple devices map to fixed constants. Everything else composes
    independent multiplicative factors over NOMINAL_BASE, rounded and
    clamped to [BASE_MIN, BASE_MAX] (asus gets a raised floor when the
    profile enables it).
    """
    if bucket == DeviceBucket.apple:
        return _apple_base(device, profile)

    value = NOMINAL_BASE
    value *= screen_size_factor(device.screen_size)
    value *= refresh_rate_factor(device.refresh_rate)
    if profile.ram_factor:
        value *= ram_factor(device.ram)
    if profile.age_factor:
        value *= age_factor(device.release_year)
    value *= _step_factor(performance_score(device), profile.performance_steps)
    if profile.brand_factor:
        value *= BRAND_FACTORS.get(bucket.value, 1.0)

    floor = ASUS_BASE_MIN if (profile.asus_floor and bucket == DeviceBucket.asus) else BASE_MIN
    return int(_clamp(_round_half_up(value), floor, BASE_MAX))


# ---------------------------------------------------------------------------
# Free tier extras
# ---------------------------------------------------------------------------

def free_tier_optimization(device: DeviceInfo, bucket: DeviceBucket) -> float:
    factor = 1.0
    if bucket == DeviceBucket.apple:
        factor *= FREE_APPLE_OPTIMIZATION
    factor *= _step_factor(performance_score(device), FREE_PERFORMANCE_OPTIMIZATION)
    return factor


def free_brand_modifier(device: DeviceInfo) -> float:
    """Coarse, name-driven brand bonus used only by the free tier."""
    brand = (device.brand or "").lower()
    name = (device.name or "").lower()

    if "samsung" in brand or "samsung" in name:
        return 1.02
    if "google" in brand or "pixel" in name:
        return 1.03
    if "oneplus" in brand or "oneplus" in name:
        return 1.04
    if any(token in name for token in FREE_GAMING_TOKENS):
        return FREE_GAMING_MODIFIER
    return 1.0


def complex_device_factor(device: DeviceInfo) -> float:
    factor = 1.0
    processor, _ = _scores(device)
    if processor > COMPLEX_TOP_PROCESSOR:
        factor *= COMPLEX_TOP_PROCESSOR_FACTOR
    elif processor < COMPLEX_LOW_PROCESSOR:
        factor *= COMPLEX_LOW_PROCESSOR_FACTOR

    size = _finite(device.screen_size, REFERENCE_SCREEN_IN)
    if size > COMPLEX_LARGE_SCREEN_IN:
        factor *= COMPLEX_LARGE_SCREEN_FACTOR
    elif size < COMPLEX_SMALL_SCREEN_IN:
        factor *= COMPLEX_SMALL_SCREEN_FACTOR
    return factor


def _tier_factor(device: DeviceInfo, bucket: DeviceBucket, profile: CalculatorProfile) -> float:
    factor = 1.0
    if profile.tier_optimization:
        factor *= free_tier_optimization(device, bucket)
    if profile.free_brand_modifier:
        factor *= free_brand_modifier(device)
    if profile.complex_factor:
        factor *= complex_device_factor(device)
    return factor


# ---------------------------------------------------------------------------
# Modifier resolver
# ---------------------------------------------------------------------------

def play_style_modifier(label: str | PlayStyle | None) -> float:
    return PLAY_STYLE_MODIFIERS[PlayStyle.parse(label).value]


def experience_modifier(label: str | ExperienceLevel | None) -> float:
    return EXPERIENCE_MODIFIERS[ExperienceLevel.parse(label).value]


# ---------------------------------------------------------------------------
# Scope ratios + clamping
# ---------------------------------------------------------------------------

def is_high_end(device: DeviceInfo) -> bool:
    return performance_score(device) > HIGH_END_PERFORMANCE


def select_scope_ratios(bucket: DeviceBucket, high_end: bool) -> dict[str, float]:
    """Apple table beats the high-end table, which beats the default."""
    if bucket == DeviceBucket.apple:
        return dict(APPLE_SCOPE_RATIOS)
    if high_end:
        return dict(HIGH_END_SCOPE_RATIOS)
    return dict(DEFAULT_SCOPE_RATIOS)


def derive_scope_values(general: float, bucket: DeviceBucket, high_end: bool) -> dict[str, float]:
    ratios = select_scope_ratios(bucket, high_end)
    return {field: general * ratios[field] for field in SCOPE_FIELDS}


def clamp_setting(field: str, value: float) -> int:
    """Round half up and saturate into the field's bounds. NaN goes to the floor."""
    lo, hi = SETTING_BOUNDS[field]
    if value is None or math.isnan(value):
        return lo
    if math.isinf(value):
        return hi if value > 0 else lo
    return int(_clamp(_round_half_up(value), lo, hi))


def clamp_settings(raw: dict[str, float]) -> SensitivitySettings:
    return SensitivitySettings(**{field: clamp_setting(field, raw[field]) for field in SETTING_BOUNDS})


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

def compute_breakdown(
    device: DeviceInfo,
    play_style: str | PlayStyle | None,
    experience_level: str | ExperienceLevel | None,
    profile: CalculatorProfile = ADVANCED_PROFILE,
    context: Optional[OptimizationContext] = None,
) -> SensitivityBreakdown:
    """
    Run the full pipeline and keep every intermediate value.

    For profiles with the temporal ramp, *context* supplies the factor; with
    no context the calculation behaves like a fresh install (factor 1.0).
    """
    style = PlayStyle.parse(play_style)
    level = ExperienceLevel.parse(experience_level)

    bucket = classify_device(device, detailed=profile.detailed_brands)
    high_end = is_high_end(device)
    base = estimate_base_value(device, bucket, profile)
    style_mod = play_style_modifier(style)
    level_mod = experience_modifier(level)

    if profile.temporal_ramp:
        optimization = context.factor() if context is not None else 1.0
    else:
        optimization = profile.basic_optimization
    tier_factor = _tier_factor(device, bucket, profile)

    general_raw = base * style_mod * level_mod * optimization * tier_factor

    raw = {"general": general_raw}
    raw.update(derive_scope_values(general_raw, bucket, high_end))
    settings = clamp_settings(raw)

    logger.debug(
        f"{profile.tier.value} calc for {device.name!r}: bucket={bucket.value} "
        f"base={base} general_raw={general_raw:.2f} -> {settings.general}"
    )

    return SensitivityBreakdown(
        tier=profile.tier,
        bucket=bucket,
        high_end=high_end,
        play_style=style,
        experience_level=level,
        base_value=base,
        play_style_modifier=style_mod,
        experience_modifier=level_mod,
        optimization_factor=optimization,
        tier_factor=tier_factor,
        general_raw=general_raw,
        scope_ratios=select_scope_ratios(bucket, high_end),
        settings=settings,
    )


def calculate_sensitivity(
    device: DeviceInfo,
    play_style: str | PlayStyle | None,
    experience_level: str | ExperienceLevel | None,
    profile: CalculatorProfile = ADVANCED_PROFILE,
    context: Optional[OptimizationContext] = None,
) -> SensitivitySettings:
    """Return the six clamped in-game sensitivity values for a device."""
    return compute_breakdown(device, play_style, experience_level, profile, context).settings


# ---------------------------------------------------------------------------
# Device summaries
# ---------------------------------------------------------------------------

def device_performance_tier(device: DeviceInfo) -> str:
    score = performance_score(device)
    for limit, label in PERFORMANCE_TIER_LIMITS:
        if score < limit:
            return label
    return "flagship"


def basic_device_summary(device: DeviceInfo) -> dict[str, str]:
    """Platform, coarse performance band and optimization level (free tier view)."""
    bucket = classify_device(device, detailed=False)
    score = performance_score(device)

    if score > HIGH_END_PERFORMANCE:
        performance = "high-end"
    elif score < 60:
        performance = "budget"
    else:
        performance = "standard"

    enhanced = free_brand_modifier(device) > FREE_ENHANCED_THRESHOLD
    return {
        "type": bucket.value,
        "performance": performance,
        "optimization": "enhanced" if enhanced else "standard",
    }
