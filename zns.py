# ============================================================
# ZNS: Zilliqa naming service
# Reads contract state with GetSmartContractSubState instead of ABI calls.
# ============================================================

import logging
from functools import partial
from typing import Dict, List, Optional, Sequence, Tuple

import bech32

from namehash import zns_childhash, zns_namehash
from naming_service import (
    BlockchainType,
    Location,
    NamingService,
    NamingServiceName,
    run_concurrently,
)
from providers import as_provider
from record_utils import construct_records, is_null_address
from resolution_config import ZnsConfig
from resolution_errors import ResolutionError, ResolutionErrorCode

logger = logging.getLogger(__name__)

ZIL_HRP = "zil"


def to_bech32_address(address: str) -> str:
    raw = bytes.fromhex(address[2:] if address.startswith("0x") else address)
    return bech32.bech32_encode(ZIL_HRP, bech32.convertbits(raw, 8, 5))


def from_bech32_address(address: str) -> str:
    hrp, data = bech32.bech32_decode(address)
    if hrp != ZIL_HRP or data is None:
        raise ValueError(f"Invalid Zilliqa address: {address}")
    return "0x" + bytes(bech32.convertbits(data, 5, 8, False)).hex()


class Zns(NamingService):
    name = NamingServiceName.ZNS

    def __init__(self, config: Optional[ZnsConfig] = None):
        config = config or ZnsConfig()
        self.config = config
        self.network_id = config.network_id
        self.url = config.endpoint
        self.provider = as_provider(config.provider if config.provider is not None else self.url, self.url)
        registry = config.registry
        self.registry_addr = to_bech32_address(registry) if registry.startswith("0x") else registry

    def is_supported_domain(self, domain: str) -> bool:
        labels = domain.split(".")
        return labels[-1] == "zil" and all(labels)

    def namehash(self, domain: str) -> str:
        self._ensure_supported(domain)
        return zns_namehash(domain)

    def childhash(self, parent: str, label: str) -> str:
        return zns_childhash(parent, label)

    def owner(self, domain: str) -> str:
        addresses = self._records_addresses(domain)
        if not addresses or not addresses[0]:
            raise ResolutionError(ResolutionErrorCode.UNREGISTERED_DOMAIN, domain=domain)
        return addresses[0]

    def resolver(self, domain: str) -> str:
        addresses = self._records_addresses(domain)
        if not addresses or not addresses[0]:
            raise ResolutionError(ResolutionErrorCode.UNREGISTERED_DOMAIN, domain=domain)
        if is_null_address(addresses[1]):
            raise ResolutionError(ResolutionErrorCode.UNSPECIFIED_RESOLVER, domain=domain)
        return addresses[1]

    def records(self, domain: str, keys: Sequence[str]) -> Dict[str, str]:
        return construct_records(list(keys), self.all_records(domain))

    def all_records(self, domain: str) -> Dict[str, str]:
        return self._resolver_records(self.resolver(domain))

    def is_registered(self, domain: str) -> bool:
        addresses = self._records_addresses(domain)
        return bool(addresses and addresses[0])

    def registry_address(self, domain: str) -> str:
        return self.registry_addr

    def twitter(self, domain: str) -> str:
        raise self._unsupported("twitter", domain)

    def get_token_uri(self, node: str) -> str:
        raise self._unsupported("getTokenUri")

    def locations(self, domains: Sequence[str]) -> Dict[str, Optional[Location]]:
        addresses = run_concurrently([partial(self._records_addresses, domain) for domain in domains])
        result = {}
        for domain, domain_addresses in zip(domains, addresses):
            if not domain_addresses or not domain_addresses[0]:
                result[domain] = None
                continue
            owner, resolver = domain_addresses
            result[domain] = Location(
                registry_address=self.registry_addr,
                resolver_address=resolver,
                network_id=self.network_id,
                blockchain=BlockchainType.ZIL,
                owner_address=owner,
                blockchain_provider_url=self.url,
            )
        return result

    # ============================================================
    # Contract state
    # ============================================================
    def _records_addresses(self, domain: str) -> Optional[Tuple[str, str]]:
        registry_record = self._contract_map_value(self.registry_addr, "records", self.namehash(domain))
        if not registry_record:
            return None
        owner, resolver = registry_record["arguments"][:2]
        if is_null_address(owner):
            owner = ""
        elif owner.startswith("0x"):
            owner = to_bech32_address(owner)
        return owner, resolver

    def _resolver_records(self, resolver: str) -> Dict[str, str]:
        if is_null_address(resolver):
            return {}
        return self._contract_field(resolver, "records") or {}

    def _contract_field(self, contract_address: str, field: str, keys: Optional[List[str]] = None):
        if contract_address.startswith("zil1"):
            contract_address = from_bech32_address(contract_address)
        params = [contract_address.lower().replace("0x", ""), field, keys or []]
        logger.debug("GetSmartContractSubState %s %s %s", params[0], field, keys or [])
        result = self.provider.request("GetSmartContractSubState", params) or {}
        return result.get(field)

    def _contract_map_value(self, contract_address: str, field: str, key: str):
        record = self._contract_field(contract_address, field, [key])
        return (record or {}).get(key)
