"""Liquidation errors. All of them are terminal for the call that raised."""


class LiquidationError(Exception):
    """Base class for liquidation failures."""


class InvalidAsset(LiquidationError):
    """Asset is not activated or cannot be used in the requested role."""

    def __init__(self, underlying: str, reason: str = "not activated") -> None:
        super().__init__(f"Invalid asset {underlying}: {reason}")
        self.underlying = underlying
        self.reason = reason


class SelfLiquidation(LiquidationError):
    """Liquidator and violator are the same account."""


class PriceUnavailable(LiquidationError):
    """Oracle has no usable price for the asset."""

    def __init__(self, underlying: str) -> None:
        super().__init__(f"No price available for {underlying}")
        self.underlying = underlying


class NotInViolation(LiquidationError):
    """Violator's health factor is at or above 1 at execution time."""

    def __init__(self, violator: str, health_factor: int) -> None:
        super().__init__(
            f"Account {violator} is not in violation (health factor {health_factor})"
        )
        self.violator = violator
        self.health_factor = health_factor


class ExcessiveRepay(LiquidationError):
    """Repay amount exceeds what is needed to restore the target health."""

    def __init__(self, requested: int, allowed: int) -> None:
        super().__init__(f"Repay amount {requested} exceeds maximum {allowed}")
        self.requested = requested
        self.allowed = allowed


class InsufficientYield(LiquidationError):
    """Collateral yield fell below the caller's minimum."""

    def __init__(self, yield_amount: int, min_yield_amount: int) -> None:
        super().__init__(
            f"Yield {yield_amount} is below minimum {min_yield_amount}"
        )
        self.yield_amount = yield_amount
        self.min_yield_amount = min_yield_amount


class LiquidatorUnhealthy(LiquidationError):
    """Liquidator would end up in violation after taking on the debt."""

    def __init__(self, liquidator: str, health_factor: int) -> None:
        super().__init__(
            f"Liquidator {liquidator} would be in violation "
            f"(health factor {health_factor})"
        )
        self.liquidator = liquidator
        self.health_factor = health_factor
