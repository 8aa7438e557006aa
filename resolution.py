# ============================================================
# Blockchain domain resolution
# UNS (.crypto, .wallet, ... on Ethereum + Polygon) and ZNS (.zil)
#
#   resolution = Resolution.infura("<project id>")
#   resolution.addr("brad.crypto", "eth")
# ============================================================

import logging
from types import MappingProxyType
from typing import Dict, List, Optional, Sequence, Union

import requests

from namehash import DEFAULT_NAMEHASH_OPTIONS, NamehashOptions, format_namehash
from naming_service import Location, NamingService, NamingServiceName
from record_utils import dns_record_keys, dns_records_to_list
from resolution_config import (
    LayerConfig,
    UnsConfig,
    ZnsConfig,
    infura_uns_config,
    load_env_config,
)
from resolution_errors import ResolutionError, ResolutionErrorCode
from uns import Uns
from zns import Zns

logger = logging.getLogger(__name__)

METADATA_TIMEOUT = 10

# Domain extension -> naming service; anything unlisted is UNS
DOMAIN_EXTENSIONS = MappingProxyType({
    "crypto": NamingServiceName.UNS,
    "zil": NamingServiceName.ZNS,
})
DEFAULT_SERVICE = NamingServiceName.UNS


def prepare_domain(domain: Optional[str]) -> str:
    return domain.strip().lower() if domain else ""


def find_naming_service_name(domain: str) -> Optional[NamingServiceName]:
    labels = domain.split(".")
    if not domain or not all(labels):
        return None
    return DOMAIN_EXTENSIONS.get(labels[-1], DEFAULT_SERVICE)


class Resolution:
    def __init__(self, uns: Union[Uns, UnsConfig, None] = None, zns: Union[Zns, ZnsConfig, None] = None):
        self.service_map: Dict[NamingServiceName, NamingService] = {}
        self.service_map[NamingServiceName.UNS] = uns if isinstance(uns, NamingService) else Uns(uns)
        self.service_map[NamingServiceName.ZNS] = zns if isinstance(zns, NamingService) else Zns(zns)

    # ========== Constructors ==========

    @classmethod
    def infura(cls, project_id: str, l1_network: str = "mainnet", l2_network: str = "polygon-mainnet", zns: Optional[ZnsConfig] = None):
        return cls(uns=infura_uns_config(project_id, l1_network, l2_network), zns=zns)

    @classmethod
    def from_providers(cls, layer1, layer2, l1_network: str = "mainnet", l2_network: str = "polygon-mainnet", zil_provider=None):
        uns = UnsConfig(
            layer1=LayerConfig(network=l1_network, provider=layer1, method="UNSL1"),
            layer2=LayerConfig(network=l2_network, provider=layer2, method="UNSL2"),
        )
        zns = ZnsConfig(provider=zil_provider) if zil_provider is not None else None
        return cls(uns=uns, zns=zns)

    @classmethod
    def from_env(cls, dotenv_path=None):
        config = load_env_config(dotenv_path)
        return cls(uns=config["uns"], zns=config["zns"])

    @classmethod
    def auto_network(cls, layer1, layer2, zns: Optional[ZnsConfig] = None):
        return cls(uns=Uns.auto_network(layer1, layer2), zns=zns)

    # ========== Dispatch ==========

    def _service(self, domain: str) -> NamingService:
        name = find_naming_service_name(domain)
        service = self.service_map.get(name) if name else None
        if service is None:
            raise ResolutionError(ResolutionErrorCode.UNSUPPORTED_DOMAIN, domain=domain)
        return service

    def _service_by_name(self, naming_service) -> NamingService:
        try:
            name = NamingServiceName(naming_service)
        except ValueError:
            name = None
        service = self.service_map.get(name) if name else None
        if service is None:
            label = naming_service.value if isinstance(naming_service, NamingServiceName) else naming_service
            raise ResolutionError(ResolutionErrorCode.UNSUPPORTED_SERVICE, naming_service=label)
        return service

    # ========== Records ==========

    def record(self, domain: str, key: str) -> str:
        domain = prepare_domain(domain)
        return self._service(domain).record(domain, key)

    def records(self, domain: str, keys: Sequence[str]) -> Dict[str, str]:
        domain = prepare_domain(domain)
        return self._service(domain).records(domain, list(keys))

    def all_records(self, domain: str) -> Dict[str, str]:
        """Every record of the domain. Slow: scans resolver event logs on UNS."""
        domain = prepare_domain(domain)
        return self._service(domain).all_records(domain)

    def addr(self, domain: str, ticker: str) -> str:
        return self.record(domain, f"crypto.{ticker.upper()}.address")

    def multi_chain_addr(self, domain: str, ticker: str, chain: str) -> str:
        return self.record(domain, f"crypto.{ticker.upper()}.version.{chain.upper()}.address")

    def email(self, domain: str) -> str:
        return self.record(domain, "whois.email.value")

    def chat_id(self, domain: str) -> str:
        return self.record(domain, "gundb.username.value")

    def chat_pk(self, domain: str) -> str:
        return self.record(domain, "gundb.public_key.value")

    def ipfs_hash(self, domain: str) -> str:
        return self._preferable_new_record(domain, "dweb.ipfs.hash", "ipfs.html.value")

    def http_url(self, domain: str) -> str:
        return self._preferable_new_record(domain, "browser.redirect_url", "ipfs.redirect_domain.value")

    def _preferable_new_record(self, domain: str, new_key: str, old_key: str) -> str:
        domain = prepare_domain(domain)
        records = self.records(domain, [new_key, old_key])
        value = records[new_key] or records[old_key]
        if not value:
            raise ResolutionError(ResolutionErrorCode.RECORD_NOT_FOUND, domain=domain, record_name=new_key)
        return value

    def twitter(self, domain: str) -> str:
        domain = prepare_domain(domain)
        return self._service(domain).twitter(domain)

    def dns(self, domain: str, types) -> List[dict]:
        domain = prepare_domain(domain)
        records = self._service(domain).records(domain, dns_record_keys(types))
        return dns_records_to_list(records, types)

    # ========== Ownership ==========

    def owner(self, domain: str) -> str:
        domain = prepare_domain(domain)
        return self._service(domain).owner(domain)

    def resolver(self, domain: str) -> str:
        domain = prepare_domain(domain)
        resolver = self._service(domain).resolver(domain)
        if not resolver:
            raise ResolutionError(ResolutionErrorCode.UNSPECIFIED_RESOLVER, domain=domain)
        return resolver

    def is_registered(self, domain: str) -> bool:
        domain = prepare_domain(domain)
        return self._service(domain).is_registered(domain)

    def is_available(self, domain: str) -> bool:
        domain = prepare_domain(domain)
        return self._service(domain).is_available(domain)

    def registry_address(self, domain: str) -> str:
        domain = prepare_domain(domain)
        return self._service(domain).registry_address(domain)

    def locations(self, domains: Sequence[str]) -> Dict[str, Optional[Location]]:
        prepared = [prepare_domain(domain) for domain in domains]
        grouped: Dict[NamingService, List[str]] = {}
        for domain in prepared:
            grouped.setdefault(self._service(domain), []).append(domain)

        found = {}
        for service, service_domains in grouped.items():
            found.update(service.locations(service_domains))
        return {domain: found[domain] for domain in prepared}

    # ========== Hashing ==========

    def namehash(self, domain: str, options: NamehashOptions = DEFAULT_NAMEHASH_OPTIONS) -> str:
        domain = prepare_domain(domain)
        return format_namehash(self._service(domain).namehash(domain), options)

    def childhash(self, parent: str, label: str, naming_service, options: NamehashOptions = DEFAULT_NAMEHASH_OPTIONS) -> str:
        service = self._service_by_name(naming_service)
        return format_namehash(service.childhash(parent, label), options)

    def is_valid_hash(self, domain: str, node: str) -> bool:
        return self.namehash(domain) == node

    def is_supported_domain(self, domain: str) -> bool:
        domain = prepare_domain(domain)
        name = find_naming_service_name(domain)
        service = self.service_map.get(name) if name else None
        return bool(service and service.is_supported_domain(domain))

    def service_name(self, domain: str) -> NamingServiceName:
        domain = prepare_domain(domain)
        return self._service(domain).service_name()

    # ========== Token metadata ==========

    def token_uri(self, domain: str) -> str:
        domain = prepare_domain(domain)
        return self._service(domain).get_token_uri(self.namehash(domain))

    def token_uri_metadata(self, domain: str) -> dict:
        return self._metadata_from_token_uri(self.token_uri(domain), "tokenURIMetadata")

    def unhash(self, node: str, naming_service) -> str:
        """Domain name for a namehash, read from the token metadata."""
        service = self._service_by_name(naming_service)
        metadata = self._metadata_from_token_uri(service.get_token_uri(node), "unhash")
        name = metadata.get("name") if isinstance(metadata, dict) else None
        if not name or int(service.namehash(prepare_domain(name)), 16) != int(node, 16):
            raise ResolutionError(
                ResolutionErrorCode.SERVICE_PROVIDER_ERROR,
                provider_message="Service provider returned an invalid domain name",
                method_name="unhash",
                domain=name,
            )
        return name

    def _metadata_from_token_uri(self, uri: str, method_name: str) -> dict:
        logger.debug("Fetching token metadata from %s", uri)
        try:
            res = requests.get(uri, timeout=METADATA_TIMEOUT)
        except requests.RequestException as e:
            raise ResolutionError(
                ResolutionErrorCode.SERVICE_PROVIDER_ERROR,
                provider_message=str(e),
                method_name=method_name,
            ) from e
        if not res.ok:
            raise ResolutionError(
                ResolutionErrorCode.SERVICE_PROVIDER_ERROR,
                provider_message=res.text,
                method_name=method_name,
            )
        try:
            return res.json()
        except ValueError as e:
            raise ResolutionError(
                ResolutionErrorCode.SERVICE_PROVIDER_ERROR,
                provider_message=f"Invalid metadata JSON: {res.text[:200]}",
                method_name=method_name,
            ) from e
