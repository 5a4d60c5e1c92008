"""
Distribution compiler.

The emitted record is the blob that gets published next to the on-chain
root. It is completely sufficient for recreating the entire merkle tree:
anyone can check that every claim is included and that the tree holds
nothing else (see audit.py).

Output document
===============
    {
      "merkleRoot": "0x<64 hex>",
      "tokenTotal": "0x<hex>",
      "claims": {
        "<checksummed account>": {
          "index": 0,
          "amount": "0x<hex>",
          "proof": ["0x<64 hex>", ...],
          "flags": {"isAirdrop": true, ...}      # only when reasons were given
        }
      }
    }
"""

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from eth_utils import encode_hex, is_address

from .config import DistributionConfig
from .entitlements import (
    BalanceEntry,
    EarningsEntry,
    IndexedEntitlement,
    RawEntry,
    assign_indices,
    normalize_entitlements,
    parse_raw_balances,
)
from .errors import DistributionIntegrityError
from .leaf import encode_leaf
from .proof import get_leaf_proof, node_from_hex, proof_from_hex, proof_to_hex
from .tree import MerkleTree

HEX_QUANTITY = re.compile(r"0x(0|[1-9a-fA-F][0-9a-fA-F]*)\Z")


@dataclass(frozen=True)
class Claim:
    index: int
    amount: int
    proof: List[bytes]
    flags: Optional[Dict[str, bool]] = None


@dataclass(frozen=True)
class DistributionRecord:
    merkle_root: bytes
    token_total: int
    claims: Dict[str, Claim]

    def to_json_dict(self) -> Dict[str, Any]:
        claims: Dict[str, Any] = {}
        for account, claim in self.claims.items():
            claim_obj: Dict[str, Any] = {
                "index": claim.index,
                "amount": hex(claim.amount),
                "proof": proof_to_hex(claim.proof),
            }
            if claim.flags is not None:
                claim_obj["flags"] = dict(claim.flags)
            claims[account] = claim_obj
        return {
            "merkleRoot": encode_hex(self.merkle_root),
            "tokenTotal": hex(self.token_total),
            "claims": claims,
        }

    @classmethod
    def from_json_dict(cls, data: Dict[str, Any]) -> "DistributionRecord":
        """Parse a published record. Raises ValueError on malformed fields."""
        if not isinstance(data, dict):
            raise ValueError("Invalid JSON: expected an object")
        for key in ("merkleRoot", "tokenTotal", "claims"):
            if key not in data:
                raise ValueError(f"Missing required field {key!r}")
        if not isinstance(data["claims"], dict):
            raise ValueError("'claims' must be an object keyed by account")

        claims: Dict[str, Claim] = {}
        for account, entry in data["claims"].items():
            if not isinstance(entry, dict):
                raise ValueError(f"Claim for {account} must be an object")
            if not is_address(account):
                raise ValueError(f"Found invalid address in claims: {account!r}")
            index = entry.get("index")
            if isinstance(index, bool) or not isinstance(index, int):
                raise ValueError(f"Claim for {account}: index must be an integer (got {index!r})")
            flags = entry.get("flags")
            claims[account] = Claim(
                index=index,
                amount=parse_hex_quantity(entry.get("amount"), f"claim amount for {account}"),
                proof=proof_from_hex(entry.get("proof") or []),
                flags=dict(flags) if flags is not None else None,
            )

        return cls(
            merkle_root=node_from_hex(data["merkleRoot"]),
            token_total=parse_hex_quantity(data["tokenTotal"], "tokenTotal"),
            claims=claims,
        )


def parse_hex_quantity(value: Any, what: str) -> int:
    """Only the canonical form hex(n) produces: 0x prefix, no sign, no zero padding."""
    if not isinstance(value, str) or not HEX_QUANTITY.match(value):
        raise ValueError(f"{what} must be a canonical 0x-prefixed hex quantity (got: {value!r})")
    return int(value[2:], 16)


def compile_distribution(
    raw: Union[Dict[str, Any], List[Any], Sequence[RawEntry]],
    config: Optional[DistributionConfig] = None,
) -> DistributionRecord:
    """
    Normalize the raw balances, build the tree and emit one claim per account.

    Raises BalanceValidationError (before any hashing) when the input has
    bad addresses, non-positive amounts or duplicate accounts.
    """
    config = config or DistributionConfig()
    if isinstance(raw, dict) or (isinstance(raw, list) and not all(_is_entry(e) for e in raw)):
        entries = parse_raw_balances(raw)
    else:
        entries = list(raw)

    indexed = assign_indices(normalize_entitlements(entries, config))

    leaves = [encode_leaf(e.index, e.account, e.amount) for e in indexed]
    tree = MerkleTree(leaves, workers=config.workers)

    claims: Dict[str, Claim] = {}
    total = 0
    for entitlement, leaf in zip(indexed, leaves):
        claims[entitlement.account] = Claim(
            index=entitlement.index,
            amount=entitlement.amount,
            proof=get_leaf_proof(tree, leaf),
            flags=entitlement.flags,
        )
        total += entitlement.amount

    _check_integrity(indexed, claims, total)

    return DistributionRecord(merkle_root=tree.root, token_total=total, claims=claims)


def _is_entry(obj: Any) -> bool:
    return isinstance(obj, (BalanceEntry, EarningsEntry))


def _check_integrity(indexed: Sequence[IndexedEntitlement], claims: Dict[str, Claim], total: int) -> None:
    if len(claims) != len(indexed):
        raise DistributionIntegrityError(
            f"Claim count mismatch: {len(indexed)} entitlements, {len(claims)} claims"
        )
    claimed = sum(c.amount for c in claims.values())
    if claimed != total:
        raise DistributionIntegrityError(f"Token total mismatch: total={total} sum of claims={claimed}")
    if sorted(c.index for c in claims.values()) != list(range(len(claims))):
        raise DistributionIntegrityError("Claim indices are not a dense 0..N-1 range")


def dump_distribution(record: DistributionRecord, path: Union[str, Path]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with open(p, "w", encoding="utf-8") as f:
        json.dump(record.to_json_dict(), f, indent=2)


def load_distribution(path: Union[str, Path]) -> DistributionRecord:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return DistributionRecord.from_json_dict(data)
