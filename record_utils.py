import json
import logging
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Union

from resolution_errors import DnsRecordsError, DnsRecordsErrorCode

logger = logging.getLogger(__name__)

DEFAULT_DNS_TTL = 300

NULL_ADDRESSES = frozenset({
    "0x",
    "0x0000000000000000000000000000000000000000",
    "0x0000000000000000000000000000000000000000000000000000000000000000",
})


def is_null_address(address) -> bool:
    return not address or address.lower() in NULL_ADDRESSES


def construct_records(keys: Sequence[str], values: Union[Sequence[Optional[str]], Mapping[str, Optional[str]], None]) -> Dict[str, str]:
    """Map every requested key to its value, defaulting anything missing to ""."""
    records = {}
    for index, key in enumerate(keys):
        if isinstance(values, Mapping):
            value = values.get(key)
        elif values is not None and index < len(values):
            value = values[index]
        else:
            value = None
        records[key] = value or ""
    return records


# ============================================================
# Standard keys
# Read whenever full key enumeration is unavailable.
# ============================================================
_CRYPTO_TICKERS = (
    "BTC", "ETH", "ZIL", "LTC", "ETC", "EQL", "LINK", "USDC", "BAT", "REP",
    "ZRX", "DAI", "BCH", "XMR", "DASH", "NEO", "DOGE", "XRP", "ZEC", "ADA",
    "EOS", "XLM", "BNB", "BTG", "NANO", "WAVES", "KMD", "AE", "RSK", "QTUM",
    "VET", "XTZ", "ICX", "MATIC", "TRX", "SOL", "ONE", "ATOM", "FTM", "AVAX",
)

STANDARD_KEYS = MappingProxyType({
    **{f"{ticker}": f"crypto.{ticker}.address" for ticker in _CRYPTO_TICKERS},
    "USDT_ERC20": "crypto.USDT.version.ERC20.address",
    "USDT_TRON": "crypto.USDT.version.TRON.address",
    "USDT_EOS": "crypto.USDT.version.EOS.address",
    "USDT_OMNI": "crypto.USDT.version.OMNI.address",
    "dns_ttl": "dns.ttl",
    "dns_A": "dns.A",
    "dns_A_ttl": "dns.A.ttl",
    "dns_AAAA": "dns.AAAA",
    "dns_AAAA_ttl": "dns.AAAA.ttl",
    "dns_CNAME": "dns.CNAME",
    "dns_CNAME_ttl": "dns.CNAME.ttl",
    "ipfs_html": "ipfs.html.value",
    "ipfs_redirect_domain": "ipfs.redirect_domain.value",
    "dweb_ipfs_hash": "dweb.ipfs.hash",
    "browser_redirect_url": "browser.redirect_url",
    "whois_email": "whois.email.value",
    "whois_for_sale": "whois.for_sale.value",
    "gundb_username": "gundb.username.value",
    "gundb_public_key": "gundb.public_key.value",
    "twitter_username": "social.twitter.username",
    "validation_twitter_username": "validation.social.twitter.username",
})


def standard_record_keys() -> List[str]:
    return list(STANDARD_KEYS.values())


# ============================================================
# DNS records
# ============================================================
class DnsRecordType(str, Enum):
    A = "A"
    AAAA = "AAAA"
    AFSDB = "AFSDB"
    APL = "APL"
    CAA = "CAA"
    CDNSKEY = "CDNSKEY"
    CDS = "CDS"
    CERT = "CERT"
    CNAME = "CNAME"
    CSYNC = "CSYNC"
    DHCID = "DHCID"
    DLV = "DLV"
    DNAME = "DNAME"
    DNSKEY = "DNSKEY"
    DS = "DS"
    EUI48 = "EUI48"
    EUI64 = "EUI64"
    HINFO = "HINFO"
    HIP = "HIP"
    HTTPS = "HTTPS"
    IPSECKEY = "IPSECKEY"
    KEY = "KEY"
    KX = "KX"
    LOC = "LOC"
    MX = "MX"
    NAPTR = "NAPTR"
    NS = "NS"
    NSEC = "NSEC"
    NSEC3 = "NSEC3"
    NSEC3PARAM = "NSEC3PARAM"
    OPENPGPKEY = "OPENPGPKEY"
    PTR = "PTR"
    RP = "RP"
    RRSIG = "RRSIG"
    SIG = "SIG"
    SMIMEA = "SMIMEA"
    SOA = "SOA"
    SRV = "SRV"
    SSHFP = "SSHFP"
    SVCB = "SVCB"
    TA = "TA"
    TKEY = "TKEY"
    TLSA = "TLSA"
    TSIG = "TSIG"
    TXT = "TXT"
    URI = "URI"
    ZONEMD = "ZONEMD"


def _type_name(record_type) -> str:
    return record_type.value if isinstance(record_type, DnsRecordType) else str(record_type)


def dns_record_keys(types) -> List[str]:
    keys = ["dns.ttl"]
    for record_type in types:
        name = _type_name(record_type)
        keys.append(f"dns.{name}")
        keys.append(f"dns.{name}.ttl")
    return keys


def _parse_json_list(raw) -> List[str]:
    if not raw:
        return []
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError):
        logger.debug("Ignoring malformed DNS value %r", raw)
        return []
    if not isinstance(parsed, list):
        return []
    return [str(item) for item in parsed]


def _parse_ttl(raw) -> Optional[int]:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def _types_from_keys(records: Mapping[str, str]) -> List[str]:
    types = []
    for key in records:
        parts = key.split(".")
        if len(parts) == 2 and parts[0] == "dns" and parts[1] != "ttl" and parts[1] not in types:
            types.append(parts[1])
    return types


def dns_records_to_list(records: Mapping[str, str], types=None) -> List[dict]:
    """Expand dns.* records into [{type, data, TTL}], one entry per value."""
    default_ttl = _parse_ttl(records.get("dns.ttl"))
    if default_ttl is None:
        default_ttl = DEFAULT_DNS_TTL
    names = [_type_name(t) for t in types] if types is not None else _types_from_keys(records)

    result = []
    for name in names:
        values = _parse_json_list(records.get(f"dns.{name}"))
        if not values:
            continue
        ttl = _parse_ttl(records.get(f"dns.{name}.ttl"))
        if ttl is None:
            ttl = default_ttl
        for data in values:
            result.append({"type": name, "data": data, "TTL": ttl})
    return result


def dns_records_to_crypto(dns_records: Sequence[Mapping]) -> Dict[str, str]:
    """Inverse of dns_records_to_list: group values per type into dns.* keys."""
    grouped = {}
    ttls = {}
    for record in dns_records:
        name = _type_name(record["type"])
        if name not in DnsRecordType.__members__:
            raise DnsRecordsError(DnsRecordsErrorCode.DNS_RECORD_NOT_SUPPORTED, record_type=name)
        ttl = int(record.get("TTL", DEFAULT_DNS_TTL))
        if name in ttls and ttls[name] != ttl:
            raise DnsRecordsError(DnsRecordsErrorCode.INCONSISTENT_TTL, record_type=name)
        ttls[name] = ttl
        grouped.setdefault(name, []).append(record["data"])

    records = {}
    for name, values in grouped.items():
        records[f"dns.{name}"] = json.dumps(values)
        records[f"dns.{name}.ttl"] = str(ttls[name])
    return records
