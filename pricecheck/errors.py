# pricecheck/errors.py


class PriceCheckError(Exception):
    """Base class for every error raised by the pricing engine."""


class ValidationFailed(PriceCheckError, ValueError):
    """Raw product input was rejected before reaching the catalog."""


class InvalidPrice(ValidationFailed):
    pass


class InvalidQuantity(ValidationFailed):
    pass


class InvalidDiscount(ValidationFailed):
    pass


class InvalidUnit(ValidationFailed):
    pass


class NotFound(PriceCheckError, LookupError):
    pass
