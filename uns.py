# ============================================================
# UNS: one naming family on two chains
#   Layer 1 - Ethereum (base layer)
#   Layer 2 - Polygon (scaling layer)
# A domain owned on layer 2 is read from layer 2, whatever layer 1 says.
# ============================================================

import logging
import re
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Dict, List, Optional, Sequence

from web3 import Web3

from known_networks import (
    ETHEREUM_NETWORKS_INVERTED,
    is_known_resolver,
    is_legacy_resolver,
    starting_block,
)
from namehash import token_id as to_token_id
from namehash import uns_childhash, uns_namehash
from naming_service import (
    BlockchainType,
    DomainData,
    Location,
    NamingService,
    NamingServiceName,
    run_concurrently,
)
from providers import Contract, as_provider
from record_utils import STANDARD_KEYS, construct_records, is_null_address, standard_record_keys
from resolution_config import LayerConfig, UnsConfig
from resolution_errors import (
    ConfigurationError,
    ConfigurationErrorCode,
    ResolutionError,
    ResolutionErrorCode,
)
from twitter_verifier import TwitterVerifier

logger = logging.getLogger(__name__)

PROXY_READER_ABI = {
    "getData": (("string[]", "uint256"), ("address", "address", "string[]")),
    "registryOf": (("uint256",), ("address",)),
    "tokenURI": (("uint256",), ("string",)),
}

RESOLVER_ABI = {
    "getManyByHash": (("uint256[]", "uint256"), ("string[]", "string[]")),
}

RESOLVER_EVENTS = {
    "NewKey": "NewKey(uint256,string,string)",
    "ResetRecords": "ResetRecords(uint256)",
}

LABEL_PATTERN = re.compile(r"^[^\s.]+$")


class UnsLocation(str, Enum):
    LAYER1 = "UNSL1"
    LAYER2 = "UNSL2"


def _address(value) -> str:
    return "" if is_null_address(value) else Web3.to_checksum_address(value)


class UnsLayer:
    """Reads one chain through its ProxyReader contract."""

    def __init__(self, config: LayerConfig, location: UnsLocation):
        self.config = config
        self.location = location
        self.network_id = config.network_id
        self.provider = as_provider(config.provider if config.provider is not None else config.url, config.url)
        self.url = config.url or self.provider.url
        self.reader = Contract(self.provider, config.proxy_reader, PROXY_READER_ABI)
        self.blockchain = BlockchainType.ETH if location == UnsLocation.LAYER1 else BlockchainType.MATIC

    @property
    def proxy_reader_address(self) -> str:
        return self.reader.address

    def get(self, node: str, keys: Sequence[str] = ()) -> DomainData:
        keys = list(keys)
        resolver, owner, values = self.reader.call("getData", [keys, to_token_id(node)])
        return DomainData(
            owner=_address(owner),
            resolver=_address(resolver),
            records=construct_records(keys, list(values)),
        )

    def registry_of(self, node: str) -> str:
        (registry,) = self.reader.call("registryOf", [to_token_id(node)])
        return _address(registry)

    def token_uri(self, node: str) -> str:
        (uri,) = self.reader.call("tokenURI", [to_token_id(node)])
        return uri

    def _resolver_contract(self, resolver: str) -> Contract:
        return Contract(self.provider, resolver, RESOLVER_ABI, RESOLVER_EVENTS)

    def fetch_logs(self, resolver: str, event_name: str, node: str, from_block: Optional[str] = None) -> List[dict]:
        return self._resolver_contract(resolver).fetch_logs(event_name, to_token_id(node), from_block or "earliest")

    def get_many_by_hash(self, resolver: str, node: str, hashes: Sequence[str]):
        keys, values = self._resolver_contract(resolver).call(
            "getManyByHash", [[int(h, 16) for h in hashes], to_token_id(node)],
        )
        return list(keys), list(values)

    def is_legacy_resolver(self, resolver: str) -> bool:
        return is_legacy_resolver(self.network_id, resolver)

    def is_known_resolver(self, resolver: str) -> bool:
        return is_known_resolver(self.network_id, resolver)

    @property
    def starting_block(self) -> str:
        return starting_block(self.network_id)


@dataclass(frozen=True)
class ResolvedLayer:
    location: UnsLocation
    data: DomainData


def choose_layer(base: DomainData, scaling: DomainData) -> Optional[ResolvedLayer]:
    """Pick the layer whose state a domain reads from.

    Ordering: owned on layer 2 > owned on layer 1 > unregistered (None).
    """
    if scaling.owner:
        return ResolvedLayer(UnsLocation.LAYER2, scaling)
    if base.owner:
        return ResolvedLayer(UnsLocation.LAYER1, base)
    return None


class Uns(NamingService):
    name = NamingServiceName.UNS

    def __init__(self, config: Optional[UnsConfig] = None, verifier: Optional[TwitterVerifier] = None):
        # Without a config only the offline operations (hashing, suffix checks) work
        self.layer1 = UnsLayer(config.layer1, UnsLocation.LAYER1) if config else None
        self.layer2 = UnsLayer(config.layer2, UnsLocation.LAYER2) if config else None
        self.verifier = verifier or TwitterVerifier()

    @classmethod
    def auto_network(cls, layer1_source, layer2_source, verifier=None):
        """Detect each layer's network with a net_version call."""
        layers = []
        for source, method in ((layer1_source, "UNSL1"), (layer2_source, "UNSL2")):
            provider = as_provider(source)
            network_id = int(str(provider.request("net_version", [])), 0)
            network = ETHEREUM_NETWORKS_INVERTED.get(network_id)
            if not network:
                raise ConfigurationError(ConfigurationErrorCode.UNSUPPORTED_NETWORK, method=method)
            layers.append(LayerConfig(network=network, provider=provider, url=provider.url, method=method))
        return cls(UnsConfig(layer1=layers[0], layer2=layers[1]), verifier)

    def _ensure_layers(self) -> None:
        if self.layer1 is None or self.layer2 is None:
            raise ConfigurationError(
                ConfigurationErrorCode.INVALID_CONFIGURATION_FIELD,
                method="UNS",
                field="url or provider",
            )

    def layer(self, location: UnsLocation) -> UnsLayer:
        return self.layer2 if location == UnsLocation.LAYER2 else self.layer1

    def is_supported_domain(self, domain: str) -> bool:
        labels = domain.split(".")
        return labels[-1] != "zil" and all(LABEL_PATTERN.match(label) for label in labels)

    def namehash(self, domain: str) -> str:
        self._ensure_supported(domain)
        return uns_namehash(domain)

    def childhash(self, parent: str, label: str) -> str:
        return uns_childhash(parent, label)

    # ========== Layer precedence ==========

    def _resolve(self, node: str, keys: Sequence[str] = ()) -> Optional[ResolvedLayer]:
        self._ensure_layers()
        base, scaling = run_concurrently([
            partial(self.layer1.get, node, keys),
            partial(self.layer2.get, node, keys),
        ])
        resolved = choose_layer(base, scaling)
        logger.debug("%s resolved on %s", node, resolved.location.value if resolved else "no layer")
        return resolved

    def _resolve_registered(self, domain: str, keys: Sequence[str] = ()) -> ResolvedLayer:
        resolved = self._resolve(self.namehash(domain), keys)
        if resolved is None:
            raise ResolutionError(ResolutionErrorCode.UNREGISTERED_DOMAIN, domain=domain)
        return resolved

    def _resolve_verified(self, domain: str, keys: Sequence[str] = ()) -> ResolvedLayer:
        resolved = self._resolve_registered(domain, keys)
        if not resolved.data.resolver:
            raise ResolutionError(ResolutionErrorCode.UNSPECIFIED_RESOLVER, domain=domain)
        return resolved

    # ========== Single-value reads ==========

    def owner(self, domain: str) -> str:
        return self._resolve_registered(domain).data.owner

    def resolver(self, domain: str) -> str:
        return self._resolve_verified(domain).data.resolver

    def records(self, domain: str, keys: Sequence[str]) -> Dict[str, str]:
        return self._resolve_verified(domain, keys).data.records

    def is_registered(self, domain: str) -> bool:
        return self._resolve(self.namehash(domain)) is not None

    def registry_address(self, domain: str) -> str:
        resolved = self._resolve_registered(domain)
        registry = self.layer(resolved.location).registry_of(self.namehash(domain))
        if not registry:
            raise ResolutionError(ResolutionErrorCode.UNREGISTERED_DOMAIN, domain=domain)
        return registry

    def get_token_uri(self, node: str) -> str:
        resolved = self._resolve(node)
        if resolved is None:
            raise ResolutionError(ResolutionErrorCode.UNREGISTERED_DOMAIN, domain=f"with namehash {node}")
        return self.layer(resolved.location).token_uri(node)

    # ========== Full records ==========

    def all_records(self, domain: str) -> Dict[str, str]:
        node = self.namehash(domain)
        resolved = self._resolve_verified(domain)
        layer = self.layer(resolved.location)
        resolver = resolved.data.resolver

        if layer.is_legacy_resolver(resolver):
            logger.debug("Legacy resolver %s, reading standard keys for %s", resolver, domain)
            return self._standard_records(layer, node)
        if not layer.is_known_resolver(resolver):
            logger.warning("Resolver %s is not listed for network %s, reading key events", resolver, layer.network_id)
        return self._enumerated_records(layer, node, resolver)

    def _standard_records(self, layer: UnsLayer, node: str) -> Dict[str, str]:
        return layer.get(node, standard_record_keys()).records

    def _enumerated_records(self, layer: UnsLayer, node: str, resolver: str) -> Dict[str, str]:
        resets = layer.fetch_logs(resolver, "ResetRecords", node)
        from_block = resets[-1]["blockNumber"] if resets else layer.starting_block
        logs = layer.fetch_logs(resolver, "NewKey", node, from_block)

        hashes = []
        for log in logs:
            topic = log["topics"][2]
            if topic not in hashes:
                hashes.append(topic)
        if not hashes:
            logger.warning("No NewKey events for %s since block %s, falling back to standard keys", node, from_block)
            return self._standard_records(layer, node)

        logger.debug("Found %d record keys for %s", len(hashes), node)
        keys, values = layer.get_many_by_hash(resolver, node, hashes)
        return construct_records(keys, values)

    # ========== Verifications ==========

    def twitter(self, domain: str) -> str:
        node = self.namehash(domain)
        signature_key = STANDARD_KEYS["validation_twitter_username"]
        handle_key = STANDARD_KEYS["twitter_username"]
        data = self._resolve_verified(domain, [signature_key, handle_key]).data

        signature = self.ensure_record_presence(domain, signature_key, data.records.get(signature_key))
        handle = self.ensure_record_presence(domain, handle_key, data.records.get(handle_key))
        if not self.verifier.verify(node, data.owner, handle, signature):
            raise ResolutionError(ResolutionErrorCode.INVALID_TWITTER_VERIFICATION, domain=domain)
        return handle

    # ========== Locations ==========

    def _snapshot(self, layer: UnsLayer, node: str):
        return layer.get(node), layer.registry_of(node)

    def locations(self, domains: Sequence[str]) -> Dict[str, Optional[Location]]:
        nodes = [self.namehash(domain) for domain in domains]
        self._ensure_layers()
        calls = []
        for node in nodes:
            calls.append(partial(self._snapshot, self.layer1, node))
            calls.append(partial(self._snapshot, self.layer2, node))
        snapshots = run_concurrently(calls)

        result = {}
        for i, domain in enumerate(domains):
            base, scaling = snapshots[2 * i], snapshots[2 * i + 1]
            resolved = choose_layer(base[0], scaling[0])
            if resolved is None:
                result[domain] = None
                continue
            layer = self.layer(resolved.location)
            registry = scaling[1] if resolved.location == UnsLocation.LAYER2 else base[1]
            result[domain] = Location(
                registry_address=registry,
                resolver_address=resolved.data.resolver,
                network_id=layer.network_id,
                blockchain=layer.blockchain,
                owner_address=resolved.data.owner,
                blockchain_provider_url=layer.url,
            )
        return result
