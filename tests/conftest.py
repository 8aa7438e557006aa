import os
import sys

import pytest

# Add project root to sys.path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from naming_service import DomainData
from resolution_config import LayerConfig, UnsConfig, ZnsConfig
from uns import Uns
from zns import Zns

L1_URL = "https://mainnet.infura.io/v3/test"
L2_URL = "https://polygon-mainnet.infura.io/v3/test"
ZIL_URL = "https://api.zilliqa.com"

OWNER_L1 = "0x499dD6D875787869670900a2130223D85d4F6Aa7"
OWNER_L2 = "0x0e43F36e4B986dfbE1a75cacfA60cA2bD44Ae962"
RESOLVER_L1 = "0x95AE1515367aa64C462c71e87157771165B1287A"
RESOLVER_L2 = "0x2a93C52E7B6E7054870758e15A1446E769EdfB93"
NULL_ADDRESS = "0x0000000000000000000000000000000000000000"


def domain_data(owner="", resolver="", records=None):
    return DomainData(owner=owner, resolver=resolver, records=records or {})


def layer_get(owner="", resolver="", records=None):
    """side_effect for UnsLayer.get returning the requested keys only."""
    records = records or {}

    def get(node, keys=()):
        return DomainData(owner=owner, resolver=resolver, records={k: records.get(k, "") for k in keys})
    return get


@pytest.fixture
def uns_config():
    return UnsConfig(
        layer1=LayerConfig(network="mainnet", url=L1_URL, method="UNSL1"),
        layer2=LayerConfig(network="polygon-mainnet", url=L2_URL, method="UNSL2"),
    )


@pytest.fixture
def uns(uns_config):
    return Uns(uns_config)


@pytest.fixture
def zns():
    return Zns(ZnsConfig(network="mainnet", url=ZIL_URL))
