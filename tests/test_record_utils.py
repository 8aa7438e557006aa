import json

import pytest

from record_utils import (
    DEFAULT_DNS_TTL,
    STANDARD_KEYS,
    DnsRecordType,
    construct_records,
    dns_record_keys,
    dns_records_to_crypto,
    dns_records_to_list,
    is_null_address,
    standard_record_keys,
)
from resolution_errors import DnsRecordsError, DnsRecordsErrorCode

DNS_DATA = {
    "dns.ttl": "128",
    "dns.A": '["10.0.0.1","10.0.0.2"]',
    "dns.A.ttl": "90",
    "dns.AAAA": '["10.0.0.120"]',
}


def test_construct_records_from_list():
    keys = ["crypto.ETH.address", "crypto.BTC.address", "dns.A"]
    records = construct_records(keys, ["0xabc", None])
    assert records == {"crypto.ETH.address": "0xabc", "crypto.BTC.address": "", "dns.A": ""}
    assert len(records) == len(keys)


def test_construct_records_from_mapping():
    records = construct_records(["a", "b"], {"a": "1", "c": "3"})
    assert records == {"a": "1", "b": ""}


def test_construct_records_without_values():
    assert construct_records(["a", "b"], None) == {"a": "", "b": ""}


def test_is_null_address():
    assert is_null_address(None)
    assert is_null_address("")
    assert is_null_address("0x")
    assert is_null_address("0x0000000000000000000000000000000000000000")
    assert not is_null_address("0x499dD6D875787869670900a2130223D85d4F6Aa7")


def test_standard_keys_cover_every_family():
    keys = standard_record_keys()
    for prefix in ("crypto.", "dns.", "ipfs.", "whois.", "social.", "validation.", "gundb."):
        assert any(key.startswith(prefix) for key in keys), prefix
    assert STANDARD_KEYS["twitter_username"] == "social.twitter.username"
    assert len(keys) == len(set(keys))


def test_dns_record_keys():
    assert dns_record_keys([DnsRecordType.A, "AAAA"]) == [
        "dns.ttl", "dns.A", "dns.A.ttl", "dns.AAAA", "dns.AAAA.ttl",
    ]


def test_dns_records_to_list():
    records = dns_records_to_list(DNS_DATA, [DnsRecordType.A, DnsRecordType.AAAA])
    assert records == [
        {"type": "A", "data": "10.0.0.1", "TTL": 90},
        {"type": "A", "data": "10.0.0.2", "TTL": 90},
        {"type": "AAAA", "data": "10.0.0.120", "TTL": 128},
    ]


def test_dns_records_follow_requested_order():
    records = dns_records_to_list(DNS_DATA, ["AAAA", "A"])
    assert [r["type"] for r in records] == ["AAAA", "A", "A"]


def test_dns_records_skip_missing_and_invalid():
    data = {"dns.A": "not json", "dns.CNAME": "", "dns.MX": '{"a": 1}'}
    assert dns_records_to_list(data, ["A", "CNAME", "MX", "TXT"]) == []


def test_dns_records_default_ttl():
    records = dns_records_to_list({"dns.A": '["1.1.1.1"]'}, ["A"])
    assert records == [{"type": "A", "data": "1.1.1.1", "TTL": DEFAULT_DNS_TTL}]


def test_dns_records_types_from_keys():
    records = dns_records_to_list(DNS_DATA)
    assert [r["type"] for r in records] == ["A", "A", "AAAA"]


def test_dns_records_to_crypto():
    records = dns_records_to_crypto([
        {"type": "A", "data": "10.0.0.1", "TTL": 90},
        {"type": "A", "data": "10.0.0.2", "TTL": 90},
        {"type": "AAAA", "data": "10.0.0.120", "TTL": 128},
    ])
    assert json.loads(records["dns.A"]) == ["10.0.0.1", "10.0.0.2"]
    assert records["dns.A.ttl"] == "90"
    assert records["dns.AAAA.ttl"] == "128"


def test_dns_records_to_crypto_inconsistent_ttl():
    with pytest.raises(DnsRecordsError) as exc:
        dns_records_to_crypto([
            {"type": "A", "data": "10.0.0.1", "TTL": 90},
            {"type": "A", "data": "10.0.0.2", "TTL": 100},
        ])
    assert exc.value.code == DnsRecordsErrorCode.INCONSISTENT_TTL


def test_dns_records_to_crypto_unsupported_type():
    with pytest.raises(DnsRecordsError) as exc:
        dns_records_to_crypto([{"type": "BOGUS", "data": "x", "TTL": 90}])
    assert exc.value.code == DnsRecordsErrorCode.DNS_RECORD_NOT_SUPPORTED
