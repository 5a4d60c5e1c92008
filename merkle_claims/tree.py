from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional, Tuple

from eth_utils import encode_hex, keccak

NODE_SIZE = 32

# below this many pairs a layer is always combined inline
PARALLEL_MIN_PAIRS = 1024


def hash_pair(a: bytes, b: bytes) -> bytes:
    """
    Node hash compatible with OpenZeppelin MerkleProof sorted-pair assumption:
    keccak256(min(a,b) || max(a,b))
    """
    return keccak(a + b) if a <= b else keccak(b + a)


def _combine_slot(layer: List[bytes], i: int) -> bytes:
    # unpaired last node moves up as is
    if i + 1 < len(layer):
        return hash_pair(layer[i], layer[i + 1])
    return layer[i]


def next_layer(layer: List[bytes], executor: Optional[ThreadPoolExecutor] = None) -> List[bytes]:
    slots = range(0, len(layer), 2)
    if executor is None or len(slots) < PARALLEL_MIN_PAIRS:
        return [_combine_slot(layer, i) for i in slots]
    # map() yields in submission order, so pairing and order match the sequential build
    return list(executor.map(lambda i: _combine_slot(layer, i), slots))


def build_layers(leaves: Iterable[bytes], workers: Optional[int] = None) -> List[List[bytes]]:
    """
    Build merkle layers bottom-up.
    layers[0] = deduplicated leaves sorted by byte value, layers[-1][0] = root

    Pairing is positional (2i, 2i+1); only the two inputs of each hash are
    sorted. An odd layer carries its last node forward without hashing.
    """
    nodes = sorted(set(leaves))
    if not nodes:
        raise ValueError("No leaves (empty input).")
    for node in nodes:
        if len(node) != NODE_SIZE:
            raise ValueError(f"Leaf must be {NODE_SIZE} bytes (got {len(node)}).")

    layers = [nodes]
    if workers is not None and workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            while len(layers[-1]) > 1:
                layers.append(next_layer(layers[-1], executor))
    else:
        while len(layers[-1]) > 1:
            layers.append(next_layer(layers[-1]))
    return layers


def build_tree(leaves: Iterable[bytes], workers: Optional[int] = None) -> Tuple[bytes, List[List[bytes]]]:
    layers = build_layers(leaves, workers=workers)
    return layers[-1][0], layers


class MerkleTree:
    """Layers of a built tree plus a lookup from leaf value to its sorted position."""

    def __init__(self, leaves: Iterable[bytes], workers: Optional[int] = None):
        self.layers = build_layers(leaves, workers=workers)
        self._positions: Dict[bytes, int] = {leaf: i for i, leaf in enumerate(self.layers[0])}

    @property
    def root(self) -> bytes:
        return self.layers[-1][0]

    @property
    def hex_root(self) -> str:
        return encode_hex(self.root)

    @property
    def leaf_count(self) -> int:
        return len(self.layers[0])

    def position(self, leaf: bytes) -> int:
        try:
            return self._positions[leaf]
        except KeyError:
            raise KeyError(f"Element does not exist in Merkle tree: {encode_hex(leaf)}") from None
