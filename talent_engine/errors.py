"""Exceptions raised by the talent engine."""


class TalentEngineError(Exception):
    """Base class for talent engine errors."""
    pass


class TextServiceError(TalentEngineError):
    """The external text-understanding service failed or returned garbage."""
    pass


class BudgetExceededError(TalentEngineError):
    """
    BYOK monthly budget exhausted with hard stop enabled.

    Unlike TextServiceError this is a billing boundary and must reach the
    caller; it is never downgraded to a fallback score.
    """

    def __init__(self, uid: str, spend_usd: float, budget_usd: float):
        self.uid = uid
        self.spend_usd = spend_usd
        self.budget_usd = budget_usd
        super().__init__(
            f"BYOK monthly budget exceeded for {uid}: "
            f"${spend_usd:.2f} of ${budget_usd:.2f} (hard stop enabled)."
        )


class UnknownModuleError(TalentEngineError, KeyError):
    """Raised when a quiz module id is not in the catalogue."""
    pass
