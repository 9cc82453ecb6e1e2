"""Exception types raised by the repositories and services."""


class LeaderboardError(Exception):
    """Base class for application errors."""


class ValidationError(LeaderboardError, ValueError):
    """Input failed presence/type validation. Raised before any write."""

    def __init__(self, errors):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class InvalidTransitionError(LeaderboardError):
    """An inference lifecycle operation is not allowed from its current status."""

    def __init__(self, inference_id: str, current: str, action: str):
        self.inference_id = inference_id
        self.current = current
        self.action = action
        super().__init__(
            f"Cannot {action} inference {inference_id}: status is '{current}'"
        )


class ProviderCallError(LeaderboardError):
    """A request to an LLM backend failed (network, auth, or API error)."""
