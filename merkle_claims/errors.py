from typing import Iterable, List


class BalanceValidationError(ValueError):
    """
    Raised when the raw balance input cannot be turned into entitlements.

    Every problem found in the batch is kept in `problems` so callers can
    report all of them at once instead of fixing one row per run.
    """

    def __init__(self, problems: Iterable[str]):
        self.problems: List[str] = list(problems)
        super().__init__("; ".join(self.problems) or "invalid balance input")


class DistributionIntegrityError(RuntimeError):
    """Compiled distribution failed its own consistency check."""
