import hashlib
from dataclasses import dataclass

from web3 import Web3

ROOT_HASH = "0x" + "00" * 32


@dataclass(frozen=True)
class NamehashOptions:
    format: str = "hex"  # "hex" or "dec"
    prefix: bool = True


DEFAULT_NAMEHASH_OPTIONS = NamehashOptions()


def _keccak(data: bytes) -> bytes:
    return bytes(Web3.keccak(primitive=data))


def _sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def _to_bytes(node: str) -> bytes:
    node = node[2:] if node.lower().startswith("0x") else node
    return bytes.fromhex(node.rjust(64, "0"))


def _childhash(parent: str, label: str, hash_fn) -> str:
    label_hash = hash_fn(label.encode("utf-8"))
    return "0x" + hash_fn(_to_bytes(parent) + label_hash).hex()


def _namehash(domain: str, hash_fn) -> str:
    node = ROOT_HASH
    if not domain:
        return node
    for label in reversed(domain.split(".")):
        node = _childhash(node, label, hash_fn)
    return node


# ============================================================
# UNS: keccak-256, same scheme as ENS (EIP-137)
# ============================================================
def uns_childhash(parent: str, label: str) -> str:
    return _childhash(parent, label, _keccak)


def uns_namehash(domain: str) -> str:
    return _namehash(domain, _keccak)


# ============================================================
# ZNS: sha-256 over the same recursive label fold
# ============================================================
def zns_childhash(parent: str, label: str) -> str:
    return _childhash(parent, label, _sha256)


def zns_namehash(domain: str) -> str:
    return _namehash(domain, _sha256)


def format_namehash(node: str, options: NamehashOptions = DEFAULT_NAMEHASH_OPTIONS) -> str:
    """Presentation only: toggle the 0x prefix or render the hash as a decimal token id."""
    digits = node[2:] if node.lower().startswith("0x") else node
    if options.format == "dec":
        return str(int(digits, 16))
    if options.format != "hex":
        raise ValueError(f"Unknown namehash format: {options.format}")
    return "0x" + digits if options.prefix else digits


def token_id(node: str) -> int:
    """Namehash as the uint256 ERC-721 token id."""
    return int(node, 16)
