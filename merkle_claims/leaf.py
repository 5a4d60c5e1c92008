from typing import Union

from eth_abi.packed import encode_packed
from eth_utils import is_address, keccak, to_checksum_address

UINT256_LIMIT = 2 ** 256
LEAF_ENCODING = ["uint256", "address", "uint256"]


def encode_leaf(index: int, account: Union[str, bytes], amount: int) -> bytes:
    """
    Must match Solidity in the distributor contract:

      bytes32 node = keccak256(abi.encodePacked(index, account, amount));

    Packed encoding is 32 + 20 + 32 bytes with no separators, so every
    (index, account, amount) triple has exactly one byte representation.
    """
    if not 0 <= index < UINT256_LIMIT:
        raise ValueError(f"index does not fit in uint256: {index}")
    if not 0 <= amount < UINT256_LIMIT:
        raise ValueError(f"amount does not fit in uint256: {amount}")
    if isinstance(account, (bytes, bytearray)):
        if len(account) != 20:
            raise ValueError(f"account must be 20 bytes (got {len(account)})")
        account = to_checksum_address(bytes(account))
    elif not is_address(account):
        raise ValueError(f"account is not a 20-byte address: {account!r}")

    return keccak(encode_packed(LEAF_ENCODING, [index, account, amount]))
