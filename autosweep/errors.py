"""Exceptions raised by the solving core."""


class ProofViolation(RuntimeError):
    """
    A move the solver proved correct turned out to be wrong.

    Raised when a deterministically proven reveal hits a mine, or when
    flagging would exceed the board's mine count. Either case means the
    solver's bookkeeping is broken, so the run must stop.
    """


class InconsistentConstraintsError(ProofViolation):
    """The visible clues admit no mine placement (impossible counts or contradictory proofs)."""
