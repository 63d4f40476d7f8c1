import re

from web3 import Web3

ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def is_valid_address(address) -> bool:
    """Check the 20-byte hex address shape (no checksum enforcement)"""
    if not isinstance(address, str):
        return False
    return bool(ADDRESS_PATTERN.match(address))


def same_address(a: str, b: str) -> bool:
    if not a or not b:
        return False
    return a.lower() == b.lower()


def to_checksum(address: str) -> str:
    if not is_valid_address(address):
        raise ValueError(f"Invalid address: {address}")
    return Web3.to_checksum_address(address)


def is_zero_address(address: str) -> bool:
    return same_address(address, ZERO_ADDRESS)
