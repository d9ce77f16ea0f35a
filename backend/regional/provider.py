# regional/provider.py
"""
Read-only lookup of regional configuration.

Safe to call from any thread: the underlying records are immutable.
"""

from typing import List

from accounting.exceptions import ConfigNotFound
from regional.configs import REGIONAL_CONFIGS, RegionalConfig


def get_config(region: str) -> RegionalConfig:
    """
    Return the configuration for a region key.

    Raises:
        ConfigNotFound: If the region key is not recognized.
    """
    config = REGIONAL_CONFIGS.get((region or "").strip().lower())
    if config is None:
        raise ConfigNotFound(f"Configuration not found for region: {region}")
    return config


def supported_regions() -> List[str]:
    return sorted(REGIONAL_CONFIGS.keys())
