"""
Device catalog + comparison scoring.

DEVICE_CATALOG is the lookup the calculators are fed from. Keys are the
display names users pick from; values are the hardware attributes the
calculator reads. Scores are on a 0-100 scale (processor and GPU
benchmarks normalised against the fastest device of the generation).

Missing optional fields (ram, release_year) are fine: the calculator
treats them as neutral.
"""

import logging
import unicodedata
from typing import Any

from utils.sensitivity_models import DeviceInfo

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 10

# Comparison score weights (sum to 1.0) and the reference maxima each
# component is scaled against.
SCREEN_WEIGHT = 0.15
REFRESH_WEIGHT = 0.25
TOUCH_WEIGHT = 0.20
PROCESSOR_WEIGHT = 0.20
GPU_WEIGHT = 0.20
SCREEN_REFERENCE_IN = 7.0
REFRESH_REFERENCE_HZ = 120.0
TOUCH_REFERENCE_HZ = 240.0


# =============================================================================
# Catalog: keyed by display name
# =============================================================================

DEVICE_CATALOG: dict[str, dict[str, Any]] = {
    "iPhone 15 Pro Max": {
        "brand": "Apple", "device_type": "phone",
        "screen_size": 6.7, "refresh_rate": 120, "touch_sampling_rate": 240,
        "processor_score": 98, "gpu_score": 97, "ram": 8, "release_year": 2023,
    },
    "iPhone 15 Pro": {
        "brand": "Apple", "device_type": "phone",
        "screen_size": 6.1, "refresh_rate": 120, "touch_sampling_rate": 240,
        "processor_score": 98, "gpu_score": 97, "ram": 8, "release_year": 2023,
    },
    "iPhone 15": {
        "brand": "Apple", "device_type": "phone",
        "screen_size": 6.1, "refresh_rate": 60, "touch_sampling_rate": 120,
        "processor_score": 90, "gpu_score": 88, "ram": 6, "release_year": 2023,
    },
    "iPhone 13": {
        "brand": "Apple", "device_type": "phone",
        "screen_size": 6.1, "refresh_rate": 60, "touch_sampling_rate": 120,
        "processor_score": 82, "gpu_score": 80, "ram": 4, "release_year": 2021,
    },
    "iPhone SE (2022)": {
        "brand": "Apple", "device_type": "phone",
        "screen_size": 4.7, "refresh_rate": 60, "touch_sampling_rate": 120,
        "processor_score": 82, "gpu_score": 74, "ram": 4, "release_year": 2022,
    },
    "iPad Pro 12.9 (2022)": {
        "brand": "Apple", "device_type": "tablet",
        "screen_size": 12.9, "refresh_rate": 120, "touch_sampling_rate": 240,
        "processor_score": 96, "gpu_score": 95, "ram": 8, "release_year": 2022,
    },
    "iPad Air (2022)": {
        "brand": "Apple", "device_type": "tablet",
        "screen_size": 10.9, "refresh_rate": 60, "touch_sampling_rate": 120,
        "processor_score": 88, "gpu_score": 84, "ram": 8, "release_year": 2022,
    },
    "Samsung Galaxy S24 Ultra": {
        "brand": "Samsung", "device_type": "phone",
        "screen_size": 6.8, "refresh_rate": 120, "touch_sampling_rate": 240,
        "processor_score": 96, "gpu_score": 95, "ram": 12, "release_year": 2024,
    },
    "Samsung Galaxy A54": {
        "brand": "Samsung", "device_type": "phone",
        "screen_size": 6.4, "refresh_rate": 120, "touch_sampling_rate": 120,
        "processor_score": 62, "gpu_score": 58, "ram": 8, "release_year": 2023,
    },
    "Samsung Galaxy A14": {
        "brand": "Samsung", "device_type": "phone",
        "screen_size": 6.6, "refresh_rate": 90, "touch_sampling_rate": 120,
        "processor_score": 38, "gpu_score": 32, "ram": 4, "release_year": 2023,
    },
    "Google Pixel 8 Pro": {
        "brand": "Google", "device_type": "phone",
        "screen_size": 6.7, "refresh_rate": 120, "touch_sampling_rate": 240,
        "processor_score": 86, "gpu_score": 82, "ram": 12, "release_year": 2023,
    },
    "Google Pixel 7a": {
        "brand": "Google", "device_type": "phone",
        "screen_size": 6.1, "refresh_rate": 90, "touch_sampling_rate": 120,
        "processor_score": 74, "gpu_score": 70, "ram": 8, "release_year": 2023,
    },
    "OnePlus 12": {
        "brand": "OnePlus", "device_type": "phone",
        "screen_size": 6.82, "refresh_rate": 120, "touch_sampling_rate": 240,
        "processor_score": 95, "gpu_score": 96, "ram": 16, "release_year": 2024,
    },
    "Xiaomi 14": {
        "brand": "Xiaomi", "device_type": "phone",
        "screen_size": 6.36, "refresh_rate": 120, "touch_sampling_rate": 240,
        "processor_score": 94, "gpu_score": 95, "ram": 12, "release_year": 2024,
    },
    "Redmi Note 13": {
        "brand": "Xiaomi", "device_type": "phone",
        "screen_size": 6.67, "refresh_rate": 120, "touch_sampling_rate": 240,
        "processor_score": 52, "gpu_score": 48, "ram": 6, "release_year": 2024,
    },
    "OPPO Find X7": {
        "brand": "OPPO", "device_type": "phone",
        "screen_size": 6.78, "refresh_rate": 120, "touch_sampling_rate": 240,
        "processor_score": 90, "gpu_score": 88, "ram": 12, "release_year": 2024,
    },
    "vivo X100 Pro": {
        "brand": "vivo", "device_type": "phone",
        "screen_size": 6.78, "refresh_rate": 120, "touch_sampling_rate": 240,
        "processor_score": 92, "gpu_score": 93, "ram": 16, "release_year": 2023,
    },
    "Huawei P60 Pro": {
        "brand": "Huawei", "device_type": "phone",
        "screen_size": 6.67, "refresh_rate": 120, "touch_sampling_rate": 300,
        "processor_score": 80, "gpu_score": 76, "ram": 8, "release_year": 2023,
    },
    "realme GT 5": {
        "brand": "realme", "device_type": "phone",
        "screen_size": 6.74, "refresh_rate": 144, "touch_sampling_rate": 240,
        "processor_score": 88, "gpu_score": 87, "ram": 16, "release_year": 2023,
    },
    "ASUS ROG Phone 8": {
        "brand": "ASUS", "device_type": "phone",
        "screen_size": 6.78, "refresh_rate": 165, "touch_sampling_rate": 720,
        "processor_score": 97, "gpu_score": 98, "ram": 16, "release_year": 2024,
    },
    "Sony Xperia 1 V": {
        "brand": "Sony", "device_type": "phone",
        "screen_size": 6.5, "refresh_rate": 120, "touch_sampling_rate": 240,
        "processor_score": 90, "gpu_score": 89, "ram": 12, "release_year": 2023,
    },
    "Nubia RedMagic 9 Pro": {
        "brand": "Nubia", "device_type": "phone",
        "screen_size": 6.8, "refresh_rate": 120, "touch_sampling_rate": 960,
        "processor_score": 96, "gpu_score": 97, "ram": 16, "release_year": 2023,
    },
    "Infinix Hot 40": {
        "brand": "Infinix", "device_type": "phone",
        "screen_size": 6.78, "refresh_rate": 90, "touch_sampling_rate": 180,
        "processor_score": 35, "gpu_score": 30, "ram": 8, "release_year": 2023,
    },
}


# =============================================================================
# Lookup helpers
# =============================================================================

def normalize_device_name(name: str) -> str:
    """Lowercase, collapse whitespace, strip accents: ' Xperia  1 V ' -> 'xperia 1 v'."""
    nfkd = unicodedata.normalize("NFKD", name or "")
    plain = "".join(c for c in nfkd if not unicodedata.combining(c))
    return " ".join(plain.lower().split())


_NORMALIZED_INDEX: dict[str, str] = {
    normalize_device_name(name): name for name in DEVICE_CATALOG
}


def get_device_info(device_name: str) -> DeviceInfo | None:
    """Look up a device by display name (case/space-insensitive)."""
    key = _NORMALIZED_INDEX.get(normalize_device_name(device_name))
    if key is None:
        return None
    return DeviceInfo(name=key, **DEVICE_CATALOG[key])


def search_devices(query: str, limit: int = SEARCH_LIMIT) -> list[str]:
    """Catalog names containing *query*, in catalog order, at most *limit*."""
    needle = normalize_device_name(query)
    if not needle:
        return []
    matches = [
        name for name in DEVICE_CATALOG
        if needle in normalize_device_name(name)
    ]
    return matches[:max(0, limit)]


def get_devices_by_brand(brand: str) -> list[str]:
    wanted = (brand or "").strip().lower()
    return [
        name for name, spec in DEVICE_CATALOG.items()
        if (spec.get("brand") or "").lower() == wanted
    ]


def calculate_device_score(device: DeviceInfo) -> int:
    """
    Weighted 0-100 hardware score used for side-by-side comparison.

    Screen, refresh and touch sampling are scaled against reference maxima
    and capped at 100; processor and GPU scores are used as-is.
    """
    screen = min(100.0, device.screen_size / SCREEN_REFERENCE_IN * 100)
    refresh = min(100.0, device.refresh_rate / REFRESH_REFERENCE_HZ * 100)
    touch = min(100.0, device.touch_sampling_rate / TOUCH_REFERENCE_HZ * 100)

    score = (
        screen * SCREEN_WEIGHT
        + refresh * REFRESH_WEIGHT
        + touch * TOUCH_WEIGHT
        + device.processor_score * PROCESSOR_WEIGHT
        + device.gpu_score * GPU_WEIGHT
    )
    return int(round(score))
