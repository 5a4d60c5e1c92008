from typing import List, Sequence, Union

from eth_utils import decode_hex, encode_hex

from .leaf import encode_leaf
from .tree import NODE_SIZE, MerkleTree, hash_pair


def get_proof(leaf_position: int, layers: Sequence[Sequence[bytes]]) -> List[bytes]:
    """
    Proof is list of sibling hashes (bytes32) from leaf level up to (but excluding) root.

    leaf_position is the leaf's position in layers[0] (the sorted leaf set),
    not the claim index. A node with no sibling adds nothing for that level.
    """
    if not 0 <= leaf_position < len(layers[0]):
        raise IndexError(f"leaf position {leaf_position} out of range (0..{len(layers[0]) - 1})")

    proof: List[bytes] = []
    idx = leaf_position
    for layer in layers[:-1]:
        sibling_idx = idx ^ 1
        if sibling_idx < len(layer):
            proof.append(layer[sibling_idx])
        idx //= 2
    return proof


def get_leaf_proof(tree: MerkleTree, leaf: bytes) -> List[bytes]:
    return get_proof(tree.position(leaf), tree.layers)


def verify_proof(
    index: int,
    account: Union[str, bytes],
    amount: int,
    proof: Sequence[bytes],
    root: bytes,
) -> bool:
    """
    Recompute the leaf for (index, account, amount) and fold the proof into it.

    Needs nothing but its arguments, so the answer is the same wherever it
    runs: here, in an audit script, or on-chain. Address casing is ignored,
    as it is on-chain; a wrong EIP-55 checksum is not an error here.
    """
    if isinstance(account, str):
        account = account.lower()
    node = encode_leaf(index, account, amount)
    for element in proof:
        node = hash_pair(node, element)
    return node == root


def proof_to_hex(proof: Sequence[bytes]) -> List[str]:
    return [encode_hex(p) for p in proof]


def node_from_hex(value: str) -> bytes:
    if not isinstance(value, str) or not value.startswith("0x"):
        raise ValueError(f"expected 0x-prefixed hex string (got: {value!r})")
    node = decode_hex(value)
    if len(node) != NODE_SIZE:
        raise ValueError(f"expected {NODE_SIZE}-byte hash (got {len(node)} bytes): {value!r}")
    return node


def proof_from_hex(proof: Sequence[str]) -> List[bytes]:
    return [node_from_hex(p) for p in proof]
