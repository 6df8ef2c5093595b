"""
Tuned constants for the sensitivity calculators.

Every number here is a product-tuning decision, not a derived quantity.
Keep the free and advanced tables separate even where they look alike;
they were tuned independently.

Tuning guide:
    - All device factors are MULTIPLIERS around 1.0 applied to NOMINAL_BASE
    - The device base is clamped to [BASE_MIN, BASE_MAX] before modifiers
    - Final per-sight values are general * ratio, then clamped per field
    - Set a factor to 1.0 to neutralise it without removing code
"""

# --- Device base ---
NOMINAL_BASE = 165.0
BASE_MIN = 150
BASE_MAX = 185
ASUS_BASE_MIN = 160            # ROG phones keep a higher floor

APPLE_TABLET_BASE = 155
APPLE_PRO_BASE = 175
APPLE_STANDARD_BASE = 171
APPLE_PRO_PROCESSOR_SCORE = 95  # advanced tier also treats >95 as "pro"

# --- Screen / refresh ---
REFERENCE_SCREEN_IN = 6.0
SCREEN_STEP_IN = 0.5
SCREEN_STEP_FACTOR = 0.98       # per half inch above the reference
REFERENCE_REFRESH_HZ = 60
REFRESH_LOG_WEIGHT = 0.15

# --- RAM / age (advanced only) ---
REFERENCE_RAM_GB = 4.0
RAM_STEP_FACTOR = 1.03          # per GB above the reference
RAM_FACTOR_CAP = 1.15
REFERENCE_RELEASE_YEAR = 2020
AGE_STEP_FACTOR = 1.02          # per year newer than the reference
AGE_MAX_YEARS = 5

# --- Performance step tables: (comparison, threshold, factor), first match wins ---
ADVANCED_PERFORMANCE_STEPS = (
    ("lt", 60, 0.95),   # budget
    ("lt", 70, 0.98),   # lower mid-range
    ("gt", 85, 1.05),   # high-end
    ("gt", 95, 1.08),   # flagship (shadowed by the row above)
)
FREE_PERFORMANCE_STEPS = (
    ("lt", 60, 0.95),
    ("gt", 85, 1.05),
)

# --- Brand factors (advanced base) ---
BRAND_FACTORS: dict[str, float] = {
    "samsung": 1.02,
    "google": 1.03,
    "oneplus": 1.04,
    "asus": 1.05,
    "xiaomi": 0.99,
    "oppo": 0.99,
    "vivo": 0.99,
}

# Scan order for detailed brand detection
ANDROID_BRAND_TOKENS = (
    "samsung", "google", "oneplus", "xiaomi", "oppo",
    "vivo", "huawei", "realme", "asus", "sony",
)

# --- Free tier extras ---
FREE_BASIC_OPTIMIZATION = 1.05
FREE_APPLE_OPTIMIZATION = 1.03
FREE_PERFORMANCE_OPTIMIZATION = (
    ("gt", 90, 1.08),
    ("gt", 75, 1.05),
    ("lt", 50, 0.95),
)
FREE_GAMING_TOKENS = ("rog", "gaming", "redmagic", "black shark")
FREE_GAMING_MODIFIER = 1.06
FREE_ENHANCED_THRESHOLD = 1.03  # brand modifier above this reads as "enhanced"

COMPLEX_TOP_PROCESSOR = 95
COMPLEX_TOP_PROCESSOR_FACTOR = 1.05
COMPLEX_LOW_PROCESSOR = 40
COMPLEX_LOW_PROCESSOR_FACTOR = 0.92
COMPLEX_LARGE_SCREEN_IN = 6.5
COMPLEX_LARGE_SCREEN_FACTOR = 1.02
COMPLEX_SMALL_SCREEN_IN = 5.5
COMPLEX_SMALL_SCREEN_FACTOR = 0.98

# --- Temporal ramp (advanced only) ---
RAMP_DAYS = 7
RAMP_DAILY_STEP = 0.02143       # day 7 lands at ~1.15
RAMP_CACHE_TTL_S = 3600
SECONDS_PER_DAY = 86400

# --- Scope ratios: red_dot / scope_2x / scope_4x / sniper_scope / free_look ---
HIGH_END_PERFORMANCE = 85

DEFAULT_SCOPE_RATIOS: dict[str, float] = {
    "red_dot": 0.65, "scope_2x": 0.55, "scope_4x": 0.40,
    "sniper_scope": 0.30, "free_look": 0.50,
}
HIGH_END_SCOPE_RATIOS: dict[str, float] = {
    "red_dot": 0.62, "scope_2x": 0.52, "scope_4x": 0.38,
    "sniper_scope": 0.28, "free_look": 0.48,
}
APPLE_SCOPE_RATIOS: dict[str, float] = {
    "red_dot": 0.68, "scope_2x": 0.58, "scope_4x": 0.42,
    "sniper_scope": 0.32, "free_look": 0.52,
}

# --- Output bounds (inclusive) ---
SETTING_BOUNDS: dict[str, tuple[int, int]] = {
    "general": (50, 200),
    "red_dot": (30, 200),
    "scope_2x": (25, 200),
    "scope_4x": (20, 200),
    "sniper_scope": (15, 200),
    "free_look": (25, 200),
}

# --- Modifier tables ---
PLAY_STYLE_MODIFIERS: dict[str, float] = {
    "aggressive": 1.12,
    "precise": 0.88,
    "balanced": 1.00,
    "defensive": 0.94,
    "unknown": 1.00,
}
EXPERIENCE_MODIFIERS: dict[str, float] = {
    "beginner": 0.92,
    "intermediate": 0.98,
    "advanced": 1.08,
    "professional": 1.12,
    "unknown": 1.00,
}

# --- Performance tiers for display ---
PERFORMANCE_TIER_LIMITS = (
    (60, "budget"),
    (75, "mid-range"),
    (90, "high-end"),
)
