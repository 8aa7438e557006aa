# ============================================================
# Known Networks Configuration
# Static lookup tables for the naming registries.
#
# Loaded once at import and exposed read-only; services receive
# these mappings by reference and never mutate them.
# ============================================================

from types import MappingProxyType


def _frozen(table):
    return MappingProxyType({k: MappingProxyType(v) if isinstance(v, dict) else v for k, v in table.items()})


# ========== UNS (Ethereum + Polygon) ==========

ETHEREUM_NETWORKS = MappingProxyType({
    "mainnet": 1,
    "goerli": 5,
    "polygon-mainnet": 137,
    "polygon-mumbai": 80001,
})

ETHEREUM_NETWORKS_INVERTED = MappingProxyType({v: k for k, v in ETHEREUM_NETWORKS.items()})

# Per chain id:
#   proxy_reader     - default ProxyReader contract
#   legacy_resolvers - resolvers without NewKey/ResetRecords events
#   resolvers        - up-to-date resolvers
#   starting_block   - first block carrying resolver key events
UNS_NETWORKS = _frozen({
    1: {
        "proxy_reader": "0x58034A288D2E56B661c9056A0C27273E5460B63c",
        "legacy_resolvers": (
            "0xa1cac442be6673c49f8e74ffc7c4fd746f3cbd0d",
            "0x878bc2f3f717766ab69c0a5f9a6144931e61aed3",
        ),
        "resolvers": (
            "0xb66dce2da6afaaa98f2013446dbcb0f4b0ab2842",
        ),
        "starting_block": "0x960844",
    },
    5: {
        "proxy_reader": "0xFc5f608149f4D9e2Ed0733efFe9DD57ee24BCF68",
        "legacy_resolvers": (),
        "resolvers": (),
        "starting_block": "earliest",
    },
    137: {
        "proxy_reader": "0xA3f32c8cd786dc089Bd1fC175F2707223aeE5d00",
        "legacy_resolvers": (),
        "resolvers": (),
        "starting_block": "earliest",
    },
    80001: {
        "proxy_reader": "0xBD4674F11d512120dFc8818DA3e0d4c60b9d6D3e",
        "legacy_resolvers": (),
        "resolvers": (),
        "starting_block": "earliest",
    },
})

# Key event scans on chains outside the table start from genesis
DEFAULT_STARTING_BLOCK = "earliest"

DEFAULT_UNS_L1_NETWORK = "mainnet"
DEFAULT_UNS_L2_NETWORK = "polygon-mainnet"

# ========== ZNS (Zilliqa) ==========

ZILLIQA_NETWORKS = MappingProxyType({
    "mainnet": 1,
    "testnet": 333,
    "localnet": 111,
})

ZILLIQA_URLS = MappingProxyType({
    1: "https://api.zilliqa.com",
    333: "https://dev-api.zilliqa.com",
    111: "http://localhost:4201",
})

ZNS_REGISTRIES = MappingProxyType({
    1: "zil1jcgu2wlx6xejqk9jw3aaankw6lsjzeunx2j0jz",
    333: "zil1hyj6m5w4atcn7s806s69r0uh5g4t84e8gp6nps",
})

# Signer of the social.twitter.username validation records
TWITTER_VERIFICATION_ADDRESS = "0x12cfb13522F13a78b650a8bCbFCf50b7CB899d82"


def infura_url(project_id, network="mainnet"):
    return f"https://{network}.infura.io/v3/{project_id}"


def is_legacy_resolver(network_id, resolver_address):
    network = UNS_NETWORKS.get(network_id)
    if not network or not resolver_address:
        return False
    return resolver_address.lower() in network["legacy_resolvers"]


def is_known_resolver(network_id, resolver_address):
    network = UNS_NETWORKS.get(network_id)
    if not network or not resolver_address:
        return False
    address = resolver_address.lower()
    return address in network["legacy_resolvers"] or address in network["resolvers"]


def starting_block(network_id):
    network = UNS_NETWORKS.get(network_id)
    return network["starting_block"] if network else DEFAULT_STARTING_BLOCK
