import pytest

from namehash import (
    ROOT_HASH,
    NamehashOptions,
    format_namehash,
    token_id,
    uns_childhash,
    uns_namehash,
    zns_childhash,
    zns_namehash,
)

BRAD_CRYPTO = "0x756e4e998dbffd803c21d23b06cd855cdc7a4b57706c95964a37e24b47c10fc9"
CRYPTO = "0x0f4a10a4f46c288cea365fcf45cccf0e9d901b945b9829ccdb54c10dc3cb7a6f"
BRAD_ZIL = "0x5fc604da00f502da70bfbc618088c0ce468ec9d18d05540935ae4118e8f50787"
ZIL = "0x9915d0456b878862e822e2361da37232f626a2e47505c8795134a95d36138ed3"


def test_uns_namehash():
    assert uns_namehash("brad.crypto") == BRAD_CRYPTO
    assert uns_namehash("crypto") == CRYPTO


def test_zns_namehash():
    assert zns_namehash("brad.zil") == BRAD_ZIL
    assert zns_namehash("zil") == ZIL


def test_root_hash():
    assert uns_namehash("") == ROOT_HASH
    assert zns_namehash("") == ROOT_HASH
    assert ROOT_HASH == "0x" + "0" * 64


def test_childhash_is_one_fold_step():
    assert uns_childhash(CRYPTO, "brad") == BRAD_CRYPTO
    assert zns_childhash(ZIL, "brad") == BRAD_ZIL
    assert uns_childhash(uns_namehash("brad.crypto"), "sub") == uns_namehash("sub.brad.crypto")
    assert zns_childhash(zns_namehash("brad.zil"), "sub") == zns_namehash("sub.brad.zil")


def test_childhash_accepts_unprefixed_parent():
    assert uns_childhash(CRYPTO[2:], "brad") == BRAD_CRYPTO


def test_families_differ():
    assert uns_namehash("brad.zil") != zns_namehash("brad.zil")


def test_format_namehash():
    assert format_namehash(BRAD_CRYPTO) == BRAD_CRYPTO
    assert format_namehash(BRAD_CRYPTO, NamehashOptions(prefix=False)) == BRAD_CRYPTO[2:]
    assert format_namehash("0x0a", NamehashOptions(format="dec")) == "10"
    assert format_namehash(BRAD_CRYPTO, NamehashOptions(format="dec")) == str(int(BRAD_CRYPTO, 16))
    assert format_namehash(BRAD_CRYPTO[2:], NamehashOptions(prefix=True)) == BRAD_CRYPTO


def test_format_namehash_rejects_unknown_format():
    with pytest.raises(ValueError):
        format_namehash(BRAD_CRYPTO, NamehashOptions(format="base64"))


def test_token_id():
    assert token_id("0x10") == 16
