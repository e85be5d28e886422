"""Engine configuration."""
from dataclasses import dataclass, field
from typing import Dict, List

from .rules import DEFAULT_BALANCE_TOLERANCE, DEFAULT_WEEKS_PER_MONTH


@dataclass
class EngineConfig:
    """Configuration shared by the resolver, aggregator and balance engine."""

    # Aggregation
    rounding_decimals: int = 2
    weeks_per_month: float = DEFAULT_WEEKS_PER_MONTH  # Quick monthly estimates only

    # Balance
    balance_tolerance: float = DEFAULT_BALANCE_TOLERANCE  # |balance| below this is "perfect"

    # Assignment statuses considered for resolution
    active_statuses: List[str] = field(default_factory=lambda: ["active"])

    def is_status_active(self, status) -> bool:
        """True if an assignment with this status should be resolved."""
        value = getattr(status, "value", status)
        return str(value) in self.active_statuses

    def to_dict(self) -> Dict:
        """Serialize to dictionary."""
        return {
            "rounding_decimals": self.rounding_decimals,
            "weeks_per_month": self.weeks_per_month,
            "balance_tolerance": self.balance_tolerance,
            "active_statuses": list(self.active_statuses),
        }

    @classmethod
    def from_dict(cls, d: Dict) -> "EngineConfig":
        """Create from dictionary, ignoring unknown keys."""
        cfg = cls()
        for key, value in d.items():
            if hasattr(cfg, key):
                if key == "active_statuses":
                    value = [str(v) for v in value]
                setattr(cfg, key, value)
        return cfg
