from .audit import AuditReport, audit_distribution
from .config import DistributionConfig
from .distribution import (
    Claim,
    DistributionRecord,
    compile_distribution,
    dump_distribution,
    load_distribution,
)
from .entitlements import (
    BalanceEntry,
    EarningsEntry,
    EntitlementRecord,
    IndexedEntitlement,
    load_raw_balances,
)
from .errors import BalanceValidationError, DistributionIntegrityError
from .leaf import encode_leaf
from .proof import get_proof, verify_proof
from .tree import MerkleTree, build_tree, hash_pair

__version__ = "1.0.0"
