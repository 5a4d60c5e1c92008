"""
Input side of a distribution: the raw balance formats we accept and their
normalization into one canonical entitlement list.

Accepted inputs
===============
1) Balance map (JSON object)
       { "<account>": "<decimal token amount>", ... }
   Amounts are scaled to the smallest unit according to the configured
   unit ('eth': decimal string times 10**decimals, 'wei': integer string).

2) Earnings records (JSON array)
       [ { "address": "<account>", "earnings": <int | "123" | "0x7b">, "reasons": "airdrop,player" }, ... ]
   Earnings are already in the smallest unit. `reasons` only sets the
   optional claim flags; it never affects hashing.

3) CSV with header columns
       wallet, ... , rewardTotal
   Rows are treated exactly like balance map entries.

Normalization
=============
- account must be a valid address; it is converted to checksum form
- amount must be > 0 and fit in uint256
- two entries normalizing to the same checksummed account is an error,
  even when the inputs only differ in letter case
- all problems in the batch are collected and raised together
- indices are assigned by sorting the checksummed accounts ascending
"""

import csv
import json
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple, Union

from eth_utils import is_address, to_checksum_address

from .config import DistributionConfig
from .errors import BalanceValidationError
from .leaf import UINT256_LIMIT

MAX_AMOUNT_DIGITS = 78  # len(str(2 ** 256 - 1))
ADDRESS_COLUMN = "wallet"
AMOUNT_COLUMN = "rewardTotal"

FLAG_REASONS = (
    ("isAirdrop", "airdrop"),
    ("isBalanceManager", "balance-manager"),
    ("isPlayer", "player"),
)


@dataclass(frozen=True)
class BalanceEntry:
    account: str
    balance: str


@dataclass(frozen=True)
class EarningsEntry:
    address: str
    earnings: Union[int, str]
    reasons: str = ""


RawEntry = Union[BalanceEntry, EarningsEntry]


@dataclass(frozen=True)
class EntitlementRecord:
    account: str
    amount: int
    flags: Optional[Dict[str, bool]] = None


@dataclass(frozen=True)
class IndexedEntitlement:
    index: int
    account: str
    amount: int
    flags: Optional[Dict[str, bool]] = None


def parse_amount_to_wei(value: str, unit: str, decimals: int = 18) -> int:
    """
    Convert a balance string to an integer amount in the smallest unit.
    - unit="eth": accepts decimals up to `decimals` places, converts exactly
    - unit="wei": must be an integer string
    """
    v = (value or "").strip()
    if unit == "wei":
        if v.startswith("+"):
            v = v[1:]
        if not v.isdigit():
            raise ValueError(f"amount must be an integer string when unit=wei (got: {value!r})")
        return int(v)

    try:
        d = Decimal(v)
    except InvalidOperation as e:
        raise ValueError(f"amount is not a valid decimal amount: {value!r}") from e
    if not d.is_finite():
        raise ValueError(f"amount is not a valid decimal amount: {value!r}")

    # Enforce <= decimals places to avoid silent rounding
    sign, digits, exponent = d.as_tuple()
    exp = -exponent if exponent < 0 else 0
    if exp > decimals:
        raise ValueError(f"amount has more than {decimals} decimals (got {exp}): {value!r}")

    # integer scaling; Decimal arithmetic would round to the thread's context precision
    shift = decimals + exponent
    if len(digits) + shift > MAX_AMOUNT_DIGITS:
        raise ValueError(f"amount does not fit in uint256: {value!r}")
    scaled = int("".join(str(digit) for digit in digits)) * 10 ** shift
    return -scaled if sign else scaled


def parse_earnings(value: Union[int, str]) -> int:
    """Earnings are already in the smallest unit: int, decimal string or 0x hex string."""
    if isinstance(value, bool):
        raise ValueError(f"earnings must be an integer (got: {value!r})")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        v = value.strip()
        if v.lower().startswith("0x"):
            return int(v[2:], 16)
        sign = -1 if v.startswith("-") else 1
        digits = v.lstrip("+-")
        if digits.isdigit():
            return sign * int(digits)
    raise ValueError(f"earnings must be an integer or integer string (got: {value!r})")


def flags_from_reasons(reasons: str) -> Optional[Dict[str, bool]]:
    if not reasons:
        return None
    return {flag: needle in reasons for flag, needle in FLAG_REASONS}


def parse_raw_balances(raw: Any) -> List[RawEntry]:
    """Resolve the two JSON input shapes into entry objects."""
    if isinstance(raw, dict):
        return [BalanceEntry(account=str(account), balance=str(balance)) for account, balance in raw.items()]

    if isinstance(raw, list):
        entries: List[RawEntry] = []
        problems: List[str] = []
        for pos, item in enumerate(raw):
            if not isinstance(item, dict) or "address" not in item or "earnings" not in item:
                problems.append(f"Record {pos}: expected object with 'address' and 'earnings'")
                continue
            entries.append(
                EarningsEntry(
                    address=str(item["address"]),
                    earnings=item["earnings"],
                    reasons=str(item.get("reasons") or ""),
                )
            )
        if problems:
            raise BalanceValidationError(problems)
        return entries

    raise BalanceValidationError(["Invalid input: expected a balance map (object) or earnings records (array)"])


class _DuplicateKeys:
    """json object_pairs_hook that remembers keys repeated within one object."""

    def __init__(self) -> None:
        self.keys: List[str] = []

    def collect(self, pairs: List[Tuple[str, Any]]) -> Dict[str, Any]:
        seen: Set[str] = set()
        for key, _ in pairs:
            if key in seen:
                self.keys.append(key)
            seen.add(key)
        return dict(pairs)


def load_raw_balances(path: Union[str, Path]) -> List[RawEntry]:
    """Read a .json or .csv balance file into entry objects."""
    p = Path(path)
    if p.suffix.lower() == ".csv":
        return _load_csv(p)

    duplicates = _DuplicateKeys()
    with open(p, "r", encoding="utf-8") as f:
        try:
            raw = json.load(f, object_pairs_hook=duplicates.collect)
        except json.JSONDecodeError as e:
            raise BalanceValidationError([f"{p}: invalid JSON: {e}"]) from e
    if duplicates.keys:
        raise BalanceValidationError([f"{p}: duplicate key: {key}" for key in duplicates.keys])
    return parse_raw_balances(raw)


def _load_csv(path: Path) -> List[RawEntry]:
    with open(path, "r", newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        cols = set(reader.fieldnames or [])
        missing = {ADDRESS_COLUMN, AMOUNT_COLUMN} - cols
        if missing:
            raise BalanceValidationError(
                [f"{path} is missing required columns: {', '.join(sorted(missing))}"]
            )
        return [
            BalanceEntry(
                account=(row.get(ADDRESS_COLUMN) or "").strip(),
                balance=(row.get(AMOUNT_COLUMN) or "").strip(),
            )
            for row in reader
        ]


def _entry_amount(entry: RawEntry, config: DistributionConfig) -> int:
    if isinstance(entry, BalanceEntry):
        return parse_amount_to_wei(entry.balance, config.unit, config.decimals)
    return parse_earnings(entry.earnings)


def normalize_entitlements(
    entries: Sequence[RawEntry],
    config: Optional[DistributionConfig] = None,
) -> List[EntitlementRecord]:
    """
    Validate and checksum every entry. Raises BalanceValidationError listing
    every bad entry; nothing is returned unless the whole batch is clean.
    """
    config = config or DistributionConfig()
    records: Dict[str, EntitlementRecord] = {}
    problems: List[str] = []

    if not entries:
        raise BalanceValidationError(["No balances (empty input)."])

    for entry in entries:
        if isinstance(entry, BalanceEntry):
            account_raw, reasons = entry.account, ""
        elif isinstance(entry, EarningsEntry):
            account_raw, reasons = entry.address, entry.reasons
        else:
            problems.append(f"Unsupported entry type: {type(entry).__name__}")
            continue

        account_raw = (account_raw or "").strip()
        try:
            amount = _entry_amount(entry, config)
        except ValueError as e:
            problems.append(f"Invalid amount for account: {account_raw}: {e}")
            continue
        if amount <= 0:
            problems.append(f"Invalid amount for account: {account_raw}: must be > 0 (got {amount})")
            continue
        if amount >= UINT256_LIMIT:
            problems.append(f"Invalid amount for account: {account_raw}: does not fit in uint256")
            continue

        if not is_address(account_raw):
            problems.append(f"Found invalid address: {account_raw!r}")
            continue
        account = to_checksum_address(account_raw)
        if account in records:
            problems.append(f"Duplicate address: {account}")
            continue

        records[account] = EntitlementRecord(account=account, amount=amount, flags=flags_from_reasons(reasons))

    if problems:
        raise BalanceValidationError(problems)
    return list(records.values())


def assign_indices(records: Sequence[EntitlementRecord]) -> List[IndexedEntitlement]:
    """Index = position of the checksummed account in ascending sort order."""
    ordered = sorted(records, key=lambda r: r.account)
    return [
        IndexedEntitlement(index=i, account=r.account, amount=r.amount, flags=r.flags)
        for i, r in enumerate(ordered)
    ]
