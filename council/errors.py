"""Exception hierarchy for the council engine."""


class CouncilError(Exception):
    """Base class for every error the council reports."""


class ProviderError(CouncilError):
    """Raised when a single participant or aggregator call fails."""

    def __init__(self, provider_name: str, message: str) -> None:
        self.provider_name = provider_name
        self.message = message
        super().__init__(f"[{provider_name}] {message}")


class AllFailedError(CouncilError):
    """No participant produced a usable answer in Stage 1."""

    def __init__(self, attempted: int) -> None:
        self.attempted = attempted
        super().__init__(f"All {attempted} participants failed to respond")


class AggregationFailedError(CouncilError):
    """The Stage 3 aggregator call failed or returned nothing."""

    def __init__(self, aggregator: str, cause: ProviderError) -> None:
        self.aggregator = aggregator
        self.cause = cause
        super().__init__(f"Aggregation via {aggregator} failed: {cause.message}")
