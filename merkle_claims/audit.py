"""
Independent audit of a published distribution.

Two separate checks, both run to completion so every failing account is
reported:

1) Rebuild the whole tree from the claims alone (leaf per claim, then the
   normal tree build) and compare the reconstructed root with the declared
   one. Catches a record whose proofs are consistent with each other but
   commit to the wrong root.
2) Verify each claim's proof against the declared root. Catches a single
   corrupted proof even when the root itself is right.

Also checked: tokenTotal equals the sum of claim amounts, claim indices
form a dense 0..N-1 range, every amount is positive, and no two claim keys
are the same address in different letter case.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from eth_utils import encode_hex

from .distribution import DistributionRecord
from .leaf import encode_leaf
from .proof import verify_proof
from .tree import build_tree


@dataclass
class AuditReport:
    declared_root: bytes
    reconstructed_root: Optional[bytes]
    root_matches: bool
    total_matches: bool
    indices_dense: bool
    accounts: Dict[str, bool] = field(default_factory=dict)
    problems: List[str] = field(default_factory=list)

    @property
    def failed_accounts(self) -> List[str]:
        return [account for account, ok in self.accounts.items() if not ok]

    @property
    def ok(self) -> bool:
        return (
            self.root_matches
            and self.total_matches
            and self.indices_dense
            and not self.failed_accounts
            and not self.problems
        )


def audit_distribution(record: DistributionRecord, workers: Optional[int] = None) -> AuditReport:
    """Check a record end to end. Returns a report; never mutates the record."""
    problems: List[str] = []
    accounts: Dict[str, bool] = {}
    leaves: List[bytes] = []

    for account, claim in record.claims.items():
        try:
            leaves.append(encode_leaf(claim.index, account, claim.amount))
            valid = verify_proof(claim.index, account, claim.amount, claim.proof, record.merkle_root)
        except ValueError as e:
            problems.append(f"{account}: cannot encode leaf: {e}")
            valid = False
        accounts[account] = valid
        if not valid:
            problems.append(f"Verification for {account} failed")
        if claim.amount <= 0:
            problems.append(f"Invalid amount for account: {account}: must be > 0 (got {claim.amount})")

    by_address: Dict[str, List[str]] = {}
    for account in record.claims:
        by_address.setdefault(account.lower(), []).append(account)
    for variants in by_address.values():
        if len(variants) > 1:
            problems.append(f"Duplicate address: {', '.join(variants)}")

    reconstructed: Optional[bytes] = None
    if leaves:
        reconstructed, _ = build_tree(leaves, workers=workers)
    else:
        problems.append("No claims in distribution")

    root_matches = reconstructed == record.merkle_root
    if reconstructed is not None and not root_matches:
        problems.append(
            f"Reconstructed root {encode_hex(reconstructed)} does not match declared root "
            f"{encode_hex(record.merkle_root)}"
        )

    claimed = sum(c.amount for c in record.claims.values())
    total_matches = claimed == record.token_total
    if not total_matches:
        problems.append(f"tokenTotal mismatch: declared={record.token_total} sum of claims={claimed}")

    indices = sorted(c.index for c in record.claims.values())
    indices_dense = indices == list(range(len(indices)))
    if not indices_dense:
        problems.append("Claim indices are not a dense 0..N-1 range")

    return AuditReport(
        declared_root=record.merkle_root,
        reconstructed_root=reconstructed,
        root_matches=root_matches,
        total_matches=total_matches,
        indices_dense=indices_dense,
        accounts=accounts,
        problems=problems,
    )
