# ============================================================
# Naming service configuration
# Immutable once built; every field is validated here so that a bad
# configuration fails before any network call is made.
# ============================================================

import os
import re
from dataclasses import dataclass
from typing import Any, Optional

from dotenv import load_dotenv

from known_networks import (
    DEFAULT_UNS_L1_NETWORK,
    DEFAULT_UNS_L2_NETWORK,
    ETHEREUM_NETWORKS,
    UNS_NETWORKS,
    ZILLIQA_NETWORKS,
    ZILLIQA_URLS,
    ZNS_REGISTRIES,
    infura_url,
)
from resolution_errors import ConfigurationError, ConfigurationErrorCode

CUSTOM_NETWORK = "custom"

ETH_ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")
ZIL_ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$|^zil1[qpzry9x8gf2tvdw0s3jn54khce6mua7l]{38}$")


@dataclass(frozen=True)
class LayerConfig:
    network: str
    url: Optional[str] = None
    provider: Any = None
    proxy_reader_address: Optional[str] = None
    chain_id: Optional[int] = None
    method: str = "UNSL1"

    def __post_init__(self):
        if not self.network:
            raise ConfigurationError(ConfigurationErrorCode.UNSUPPORTED_NETWORK, method=self.method)
        if self.network == CUSTOM_NETWORK:
            if not self.proxy_reader_address:
                raise ConfigurationError(
                    ConfigurationErrorCode.CUSTOM_NETWORK_CONFIG_MISSING,
                    method=self.method,
                    config="proxyReaderAddress",
                )
            if not self.url and self.provider is None:
                raise ConfigurationError(
                    ConfigurationErrorCode.CUSTOM_NETWORK_CONFIG_MISSING,
                    method=self.method,
                    config="url or provider",
                )
        elif self.network not in ETHEREUM_NETWORKS:
            raise ConfigurationError(ConfigurationErrorCode.UNSUPPORTED_NETWORK, method=self.method)
        elif not self.url and self.provider is None:
            raise ConfigurationError(
                ConfigurationErrorCode.INVALID_CONFIGURATION_FIELD,
                method=self.method,
                field="url or provider",
            )
        if self.proxy_reader_address is not None and not ETH_ADDRESS_PATTERN.match(self.proxy_reader_address):
            raise ConfigurationError(
                ConfigurationErrorCode.INVALID_CONFIGURATION_FIELD,
                method=self.method,
                field="proxyReaderAddress",
            )

    @property
    def network_id(self) -> Optional[int]:
        return ETHEREUM_NETWORKS.get(self.network, self.chain_id)

    @property
    def proxy_reader(self) -> str:
        if self.proxy_reader_address:
            return self.proxy_reader_address
        return UNS_NETWORKS[self.network_id]["proxy_reader"]


@dataclass(frozen=True)
class UnsConfig:
    layer1: LayerConfig
    layer2: LayerConfig


@dataclass(frozen=True)
class ZnsConfig:
    network: str = "mainnet"
    url: Optional[str] = None
    provider: Any = None
    registry_address: Optional[str] = None
    chain_id: Optional[int] = None

    def __post_init__(self):
        if not self.network:
            raise ConfigurationError(ConfigurationErrorCode.UNSUPPORTED_NETWORK, method="ZNS")
        if self.network not in ZILLIQA_NETWORKS:
            if not self.registry_address:
                raise ConfigurationError(
                    ConfigurationErrorCode.CUSTOM_NETWORK_CONFIG_MISSING,
                    method="ZNS",
                    config="registryAddress",
                )
            if not self.url and self.provider is None:
                raise ConfigurationError(
                    ConfigurationErrorCode.CUSTOM_NETWORK_CONFIG_MISSING,
                    method="ZNS",
                    config="url or provider",
                )
        if not ZIL_ADDRESS_PATTERN.match(self.registry or ""):
            raise ConfigurationError(
                ConfigurationErrorCode.INVALID_CONFIGURATION_FIELD,
                method="ZNS",
                field="registryAddress",
            )

    @property
    def network_id(self) -> Optional[int]:
        return ZILLIQA_NETWORKS.get(self.network, self.chain_id)

    @property
    def registry(self) -> Optional[str]:
        return self.registry_address or ZNS_REGISTRIES.get(self.network_id)

    @property
    def endpoint(self) -> Optional[str]:
        return self.url or ZILLIQA_URLS.get(self.network_id)


def infura_uns_config(project_id, l1_network=DEFAULT_UNS_L1_NETWORK, l2_network=DEFAULT_UNS_L2_NETWORK):
    return UnsConfig(
        layer1=LayerConfig(network=l1_network, url=infura_url(project_id, l1_network), method="UNSL1"),
        layer2=LayerConfig(network=l2_network, url=infura_url(project_id, l2_network), method="UNSL2"),
    )


def _layer_from_env(prefix, default_network, default_url, method):
    url = os.getenv(f"{prefix}_URL") or default_url
    if not url:
        return None
    return LayerConfig(
        network=os.getenv(f"{prefix}_NETWORK", default_network),
        url=url,
        proxy_reader_address=os.getenv(f"{prefix}_PROXY_READER") or None,
        method=method,
    )


def load_env_config(dotenv_path=None):
    """Build UNS/ZNS configs from the environment (and .env, if present).

    UNS is configured only when both layers have an endpoint, either
    explicitly or derived from INFURA_PROJECT_ID.
    """
    load_dotenv(dotenv_path)
    infura_id = os.getenv("INFURA_PROJECT_ID")
    l1_network = os.getenv("RESOLUTION_UNS_L1_NETWORK", DEFAULT_UNS_L1_NETWORK)
    l2_network = os.getenv("RESOLUTION_UNS_L2_NETWORK", DEFAULT_UNS_L2_NETWORK)

    layer1 = _layer_from_env(
        "RESOLUTION_UNS_L1", l1_network,
        infura_url(infura_id, l1_network) if infura_id else None, "UNSL1",
    )
    layer2 = _layer_from_env(
        "RESOLUTION_UNS_L2", l2_network,
        infura_url(infura_id, l2_network) if infura_id else None, "UNSL2",
    )
    uns = UnsConfig(layer1=layer1, layer2=layer2) if layer1 and layer2 else None

    zns = ZnsConfig(
        network=os.getenv("RESOLUTION_ZNS_NETWORK", "mainnet"),
        url=os.getenv("RESOLUTION_ZNS_URL") or None,
        registry_address=os.getenv("RESOLUTION_ZNS_REGISTRY") or None,
    )
    return {"uns": uns, "zns": zns}
