import pytest
from eth_utils import to_checksum_address


def make_address(i: int) -> str:
    """Deterministic lowercase address with hex letters in it."""
    return "0x" + f"{i:04x}" + "abcdef0123456789abcdef0123456789abcd"


ACCOUNT_A = "0x" + "1" * 40
ACCOUNT_B = "0x" + "2" * 40


@pytest.fixture
def accounts():
    return [make_address(i) for i in range(7)]


@pytest.fixture
def balance_map(accounts):
    return {account: str(i + 1) for i, account in enumerate(accounts)}


@pytest.fixture
def checksummed(accounts):
    return [to_checksum_address(a) for a in accounts]
