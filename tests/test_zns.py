from unittest.mock import MagicMock

import pytest

from conftest import NULL_ADDRESS, ZIL_URL
from known_networks import ZNS_REGISTRIES
from naming_service import BlockchainType, Location, NamingServiceName
from namehash import zns_namehash
from providers import CallableProvider
from resolution_config import ZnsConfig
from resolution_errors import (
    ConfigurationError,
    ConfigurationErrorCode,
    ResolutionError,
    ResolutionErrorCode,
)
from zns import Zns, from_bech32_address, to_bech32_address

OWNER_HEX = "0x2d418942dce1afa02d0733a2000c71b371a6ac07"
RESOLVER_HEX = "0xdac22230adfe4601f00631eae92df6d77f054891"
RESOLVER_RECORDS = {
    "crypto.BCH.address": "qrq4sk49ayvepqz7j7ep8x4km2qp8lauvcnzhveyu6",
    "crypto.ETH.address": "0x45b31e01AA6f42F0549aD482BE81635ED3149abb",
    "ipfs.html.value": "QmVaAtQbi3EtsfpKoLzALm6vXphdi2KjMgxEDKeGg6wHuK",
}


def fake_zilliqa(domains):
    """GetSmartContractSubState backed by {domain: (owner, resolver)}."""
    by_node = {zns_namehash(d): {"argtypes": [], "arguments": list(a), "constructor": "Record"} for d, a in domains.items()}

    def request(method, params):
        assert method == "GetSmartContractSubState"
        address, field, keys = params
        assert not address.startswith("0x")
        if keys:
            found = {k: by_node[k] for k in keys if k in by_node}
            return {field: found} if found else None
        return {field: dict(RESOLVER_RECORDS)}
    return MagicMock(side_effect=request)


def make_zns(domains):
    rpc = fake_zilliqa(domains)
    return Zns(ZnsConfig(network="mainnet", provider=CallableProvider(rpc, ZIL_URL))), rpc


def test_bech32_round_trip():
    zil = to_bech32_address(OWNER_HEX)
    assert zil.startswith("zil1")
    assert from_bech32_address(zil) == OWNER_HEX


def test_from_bech32_rejects_other_prefix():
    with pytest.raises(ValueError):
        from_bech32_address("bc1qar0srrr7xfkvy5l643lydnw9re59gtzzwf5mdq")


def test_default_registry_is_mainnet(zns):
    assert zns.registry_addr == ZNS_REGISTRIES[1]
    assert zns.url == ZIL_URL
    assert zns.network_id == 1


def test_owner_is_bech32():
    zns, _ = make_zns({"brad.zil": (OWNER_HEX, RESOLVER_HEX)})
    assert zns.owner("brad.zil") == to_bech32_address(OWNER_HEX)


def test_resolver_keeps_contract_address():
    zns, _ = make_zns({"brad.zil": (OWNER_HEX, RESOLVER_HEX)})
    assert zns.resolver("brad.zil") == RESOLVER_HEX


def test_registry_query_uses_namehash_key():
    zns, rpc = make_zns({"brad.zil": (OWNER_HEX, RESOLVER_HEX)})
    zns.owner("brad.zil")
    address, field, keys = rpc.call_args.args[1]
    assert address == from_bech32_address(ZNS_REGISTRIES[1])[2:]
    assert field == "records"
    assert keys == [zns_namehash("brad.zil")]


def test_unregistered_domain():
    zns, _ = make_zns({})
    for method in (zns.owner, zns.resolver, zns.all_records):
        with pytest.raises(ResolutionError) as exc:
            method("nope.zil")
        assert exc.value.code == ResolutionErrorCode.UNREGISTERED_DOMAIN
    assert zns.is_registered("nope.zil") is False
    assert zns.is_available("nope.zil") is True


def test_null_owner_is_unregistered():
    zns, _ = make_zns({"old.zil": (NULL_ADDRESS, RESOLVER_HEX)})
    assert zns.is_registered("old.zil") is False


def test_unspecified_resolver():
    zns, _ = make_zns({"brad.zil": (OWNER_HEX, NULL_ADDRESS)})
    assert zns.owner("brad.zil") == to_bech32_address(OWNER_HEX)
    with pytest.raises(ResolutionError) as exc:
        zns.records("brad.zil", ["crypto.ETH.address"])
    assert exc.value.code == ResolutionErrorCode.UNSPECIFIED_RESOLVER


def test_records_are_filtered_client_side():
    zns, _ = make_zns({"brad.zil": (OWNER_HEX, RESOLVER_HEX)})
    records = zns.records("brad.zil", ["crypto.ETH.address", "crypto.BTC.address"])
    assert records == {
        "crypto.ETH.address": RESOLVER_RECORDS["crypto.ETH.address"],
        "crypto.BTC.address": "",
    }


def test_all_records():
    zns, _ = make_zns({"brad.zil": (OWNER_HEX, RESOLVER_HEX)})
    assert zns.all_records("brad.zil") == RESOLVER_RECORDS


def test_record_not_found():
    zns, _ = make_zns({"brad.zil": (OWNER_HEX, RESOLVER_HEX)})
    with pytest.raises(ResolutionError) as exc:
        zns.record("brad.zil", "crypto.BTC.address")
    assert exc.value.code == ResolutionErrorCode.RECORD_NOT_FOUND


def test_unsupported_methods():
    zns, rpc = make_zns({"brad.zil": (OWNER_HEX, RESOLVER_HEX)})
    with pytest.raises(ResolutionError) as exc:
        zns.twitter("brad.zil")
    assert exc.value.code == ResolutionErrorCode.UNSUPPORTED_METHOD
    with pytest.raises(ResolutionError) as exc:
        zns.get_token_uri(zns_namehash("brad.zil"))
    assert exc.value.code == ResolutionErrorCode.UNSUPPORTED_METHOD
    rpc.assert_not_called()


def test_supported_domains(zns):
    assert zns.is_supported_domain("brad.zil")
    assert not zns.is_supported_domain("brad.crypto")
    assert not zns.is_supported_domain(".zil")
    assert zns.service_name() == NamingServiceName.ZNS


def test_locations():
    zns, _ = make_zns({"brad.zil": (OWNER_HEX, RESOLVER_HEX)})
    locations = zns.locations(["brad.zil", "nope.zil"])
    assert locations["brad.zil"] == Location(
        registry_address=ZNS_REGISTRIES[1],
        resolver_address=RESOLVER_HEX,
        network_id=1,
        blockchain=BlockchainType.ZIL,
        owner_address=to_bech32_address(OWNER_HEX),
        blockchain_provider_url=ZIL_URL,
    )
    assert locations["nope.zil"] is None


def test_hex_registry_is_converted():
    registry_hex = from_bech32_address(ZNS_REGISTRIES[1])
    zns = Zns(ZnsConfig(network="mainnet", url=ZIL_URL, registry_address=registry_hex))
    assert zns.registry_addr == ZNS_REGISTRIES[1]


# ============================================================
# Configuration
# ============================================================
def test_custom_network_requires_registry():
    with pytest.raises(ConfigurationError) as exc:
        ZnsConfig(network="devnet", url="http://localhost:5555")
    assert exc.value.code == ConfigurationErrorCode.CUSTOM_NETWORK_CONFIG_MISSING


def test_invalid_registry_address():
    with pytest.raises(ConfigurationError) as exc:
        ZnsConfig(network="mainnet", registry_address="0x123")
    assert exc.value.code == ConfigurationErrorCode.INVALID_CONFIGURATION_FIELD


def test_empty_network():
    with pytest.raises(ConfigurationError) as exc:
        ZnsConfig(network="")
    assert exc.value.code == ConfigurationErrorCode.UNSUPPORTED_NETWORK
