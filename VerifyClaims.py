#!/usr/bin/env python3
import sys
from typing import List, Optional

from eth_utils import encode_hex

from merkle_claims.audit import audit_distribution
from merkle_claims.distribution import load_distribution


def usage() -> str:
    return (
        "Usage:\n"
        "  python VerifyClaims.py <distribution_json>\n\n"
        "Arguments (positional):\n"
        "  <distribution_json>  Record written by GenerateClaims.py (merkleRoot, tokenTotal, claims)\n\n"
        "Checks every claim's proof against merkleRoot, rebuilds the tree from the\n"
        "claims alone and compares roots. Exit code is 1 on any failure.\n"
    )


def run(path: str) -> int:
    try:
        record = load_distribution(path)
    except FileNotFoundError:
        print(f"Distribution file not found: {path!r}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Invalid distribution file {path!r}: {e}", file=sys.stderr)
        return 1

    report = audit_distribution(record)

    for account, claim in record.claims.items():
        if report.accounts.get(account):
            print("Verified proof for", claim.index, account)
        else:
            print("Verification for", account, "failed")

    declared = encode_hex(report.declared_root)
    reconstructed = encode_hex(report.reconstructed_root) if report.reconstructed_root else "(none)"
    print("Declared merkle root     :", declared)
    print("Reconstructed merkle root:", reconstructed)
    print("Root matches the one read from the JSON?", report.root_matches)
    print("tokenTotal matches sum of claims?", report.total_matches)

    if not report.ok:
        for problem in report.problems:
            print(f"Error: {problem}", file=sys.stderr)
        print(f"Failed validation: {len(report.failed_accounts)} account(s) failed", file=sys.stderr)
        return 1

    print("Done!")
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print(usage(), file=sys.stderr)
        raise SystemExit(2)
    raise SystemExit(run(args[0]))


if __name__ == "__main__":
    main()
