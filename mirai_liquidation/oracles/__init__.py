"""Price oracles."""
from .pyth import PythOracle
from .snapshot import PriceSnapshot

__all__ = ["PriceSnapshot", "PythOracle"]
