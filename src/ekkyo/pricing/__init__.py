class ProfitCalculationError(Exception):
    """Raised when profit or price cannot be computed for one SKU."""

    def __init__(self, message: str, sku: str | None = None):
        super().__init__(message)
        self.sku = sku


class ProductNotFound(ProfitCalculationError):
    """No product registered under the SKU."""


class MissingProductData(ProfitCalculationError):
    """Product lacks weight_kg or hs_code."""


class InvalidPurchasePrice(ProfitCalculationError):
    """Domestic purchase price missing or not positive."""


class InvalidSellingPrice(ProfitCalculationError):
    """Overseas selling price not positive."""


class ExchangeRateUnavailable(ProfitCalculationError):
    """Required currency pair could not be resolved."""


class PlatformNotConfigured(ProfitCalculationError):
    """Unknown platform name or no fee schedule for it."""


class NoShippingRateFound(ProfitCalculationError):
    """No shipping zone or weight band covers the parcel."""
