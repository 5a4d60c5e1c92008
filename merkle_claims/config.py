from dataclasses import dataclass, replace
from typing import Optional

# ---------------------------
# DEFAULT SETTINGS
# ---------------------------

DEFAULT_OUTPUT_PATH = "data/merkle-result.json"
DEFAULT_UNIT = "eth"      # unit of plain balance strings: 'eth' (decimal, scaled) or 'wei' (integer)
DEFAULT_DECIMALS = 18     # token decimals used when unit == 'eth'

UNITS = ("eth", "wei")


@dataclass(frozen=True)
class DistributionConfig:
    unit: str = DEFAULT_UNIT
    decimals: int = DEFAULT_DECIMALS
    output_path: str = DEFAULT_OUTPUT_PATH
    # >1 combines the pairs of large tree layers on a thread pool
    workers: Optional[int] = None

    def __post_init__(self) -> None:
        if self.unit not in UNITS:
            raise ValueError(f"unit must be 'eth' or 'wei' (got: {self.unit!r})")
        if self.decimals < 0:
            raise ValueError(f"decimals cannot be negative (got: {self.decimals})")

    def with_unit(self, unit: str) -> "DistributionConfig":
        return replace(self, unit=unit.strip().lower())
