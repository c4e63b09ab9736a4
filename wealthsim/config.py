"""Configuration management for the wealth projection engine."""

from dataclasses import dataclass
from typing import Dict, List


@dataclass
class AppConfig:
    """Application configuration."""

    # Projection settings
    default_projection_months: int = 12
    max_projection_months: int = 600

    # Allocation settings
    default_strategy: str = "dca"
    investable_asset_types: List[str] = None
    min_holding_allocation: float = 1.0  # holdings receiving less are dropped

    # Annual yields (%) and target weights (%) keyed by asset type
    default_yields: Dict[str, float] = None
    default_targets: Dict[str, float] = None

    # Display settings
    month_label_format: str = "%b %y"
    currency: str = "€"  # symbol appended by utils.format_currency

    def __post_init__(self):
        """Set default values after initialization."""
        if self.investable_asset_types is None:
            self.investable_asset_types = ["stock", "crypto", "metal", "cash"]
        if self.default_yields is None:
            self.default_yields = {
                "stock": 7.0,
                "crypto": 10.0,
                "metal": 3.0,
                "cash": 2.0,
                "real_estate": 3.0,
                "other": 0.0,
            }
        if self.default_targets is None:
            self.default_targets = {
                "stock": 60.0,
                "crypto": 10.0,
                "metal": 10.0,
                "cash": 20.0,
            }


# Global configuration instance
config = AppConfig()


def get_config() -> AppConfig:
    """Get the application configuration."""
    return config


def update_config(**kwargs) -> None:
    """Update configuration with new values."""
    global config
    for key, value in kwargs.items():
        if hasattr(config, key):
            setattr(config, key, value)
        else:
            raise ValueError(f"Unknown configuration key: {key}")


def reset_config() -> AppConfig:
    """Restore the default configuration."""
    global config
    config = AppConfig()
    return config
