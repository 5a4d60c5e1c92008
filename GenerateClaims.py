#!/usr/bin/env python3
import sys
from decimal import Decimal, localcontext
from typing import List, Optional

from merkle_claims.config import DEFAULT_OUTPUT_PATH, DistributionConfig, UNITS
from merkle_claims.distribution import compile_distribution, dump_distribution
from merkle_claims.entitlements import load_raw_balances
from merkle_claims.errors import BalanceValidationError


def usage() -> str:
    return (
        "Usage:\n"
        "  python GenerateClaims.py <input_path> [<unit>]\n\n"
        "Arguments (positional):\n"
        "  <input_path>  Balances file: .json (account->amount map or earnings records) or .csv\n"
        "  <unit>        'eth' or 'wei': unit of plain balance amounts (default: eth)\n\n"
        "JSON input shapes:\n"
        "  {\"0xabc...\": \"12.5\", ...}\n"
        "  [{\"address\": \"0xabc...\", \"earnings\": \"0x2b5e3af16b1880000\", \"reasons\": \"airdrop\"}, ...]\n"
        "CSV schema expected (header must include these columns):\n"
        "  wallet, ... , rewardTotal\n"
        f"Output is written to {DEFAULT_OUTPUT_PATH}\n"
    )


def run(input_path: str, config: DistributionConfig) -> int:
    try:
        entries = load_raw_balances(input_path)
        record = compile_distribution(entries, config)
    except FileNotFoundError:
        print(f"Input file not found: {input_path!r}", file=sys.stderr)
        return 1
    except BalanceValidationError as e:
        for problem in e.problems:
            print(f"Error: {problem}", file=sys.stderr)
        print(f"{len(e.problems)} problem(s) in {input_path}; nothing written.", file=sys.stderr)
        return 1

    dump_distribution(record, config.output_path)

    root_hex = record.to_json_dict()["merkleRoot"]
    print("merkleRoot:", root_hex)
    print("input entries:", len(entries))
    print("claims:", len(record.claims))
    print("tokenTotal (smallest unit):", record.token_total)
    if config.unit == "eth":
        with localcontext() as ctx:
            ctx.prec = 100
            print("tokenTotal (tokens):", Decimal(record.token_total).scaleb(-config.decimals))
    print("wrote:", config.output_path)
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    args = sys.argv[1:] if argv is None else argv
    if len(args) not in (1, 2):
        print(usage(), file=sys.stderr)
        raise SystemExit(2)

    unit = args[1].strip().lower() if len(args) == 2 else DistributionConfig().unit
    if unit not in UNITS:
        print("Error: <unit> must be 'eth' or 'wei'\n", file=sys.stderr)
        print(usage(), file=sys.stderr)
        raise SystemExit(2)

    raise SystemExit(run(args[0], DistributionConfig(unit=unit)))


if __name__ == "__main__":
    main()
