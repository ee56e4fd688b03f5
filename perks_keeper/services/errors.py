"""Service-level errors surfaced to callers."""


class OfferNotFoundError(LookupError):
    """Raised when editing or logging spend against an offer that no longer exists."""

    def __init__(self, offer_id: str):
        super().__init__("Offer no longer exists.")
        self.offer_id = offer_id


class InputValidationError(ValueError):
    """User input rejected before anything is written; the message is user-facing."""
