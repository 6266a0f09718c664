class NoFinalStateException(Exception):
    """Raised when a best-derivation search is requested on an automaton
       that has no final state."""

    def __init__(self, message="No final state has been set on the automaton."):
        super().__init__(message)


class NegativeWeightError(ValueError):
    """Raised for a negative (or NaN) initial weight or symbol cost. The
       search finalizes states greedily, which is only optimal when no
       weight can decrease a derivation."""

    def __init__(self, weight, what="weight"):
        self.weight = weight
        super().__init__(f"{what} must be a non-negative number, got {weight!r}")
