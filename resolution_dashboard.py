# ============================================================
# 🌐 Domain Resolution Dashboard
# UNS (.crypto / .wallet / ...) + ZNS (.zil)
#
#   streamlit run resolution_dashboard.py
# ============================================================

import logging

import pandas as pd
import streamlit as st

from record_utils import DnsRecordType
from resolution import Resolution, prepare_domain
from resolution_errors import ConfigurationError, ResolutionError, ResolutionErrorCode

DEFAULT_DNS_TYPES = [DnsRecordType.A, DnsRecordType.AAAA, DnsRecordType.CNAME]


# ============================================================
# Helper functions
# ============================================================
def format_address(addr):
    if not addr or len(addr) < 12:
        return addr
    return f"{addr[:6]}...{addr[-4:]}"


def records_frame(records):
    rows = [{"Key": key, "Value": value} for key, value in sorted(records.items()) if value]
    return pd.DataFrame(rows, columns=["Key", "Value"])


def dns_frame(dns_records):
    return pd.DataFrame(dns_records, columns=["type", "data", "TTL"])


def location_summary(location):
    if location is None:
        return None
    return {
        "Registry": location.registry_address,
        "Resolver": location.resolver_address,
        "Owner": location.owner_address,
        "Network": location.network_id,
        "Blockchain": location.blockchain.value,
        "Provider": location.blockchain_provider_url,
    }


def lookup(resolution, domain, dns_types=DEFAULT_DNS_TYPES):
    """Everything the dashboard shows for one domain, in one dict."""
    domain = prepare_domain(domain)
    location = resolution.locations([domain])[domain]
    owner = resolution.owner(domain)
    try:
        resolver = resolution.resolver(domain)
        records = resolution.all_records(domain)
        dns = resolution.dns(domain, dns_types)
    except ResolutionError as e:
        if e.code != ResolutionErrorCode.UNSPECIFIED_RESOLVER:
            raise
        resolver, records, dns = "", {}, []
    return {
        "domain": domain,
        "namehash": resolution.namehash(domain),
        "service": resolution.service_name(domain).value,
        "owner": owner,
        "resolver": resolver,
        "records": records,
        "dns": dns,
        "location": location_summary(location),
    }


# ============================================================
# Streamlit UI
# ============================================================
def main():
    logging.basicConfig(level=logging.INFO)
    st.set_page_config(page_title="Domain Resolution Dashboard", layout="wide")
    st.title("🌐 Blockchain Domain Resolution")

    try:
        resolution = Resolution.from_env()
    except ConfigurationError as e:
        st.error(f"❌ Configuration error: {e}")
        st.stop()
        return

    domain = st.text_input("Domain (e.g. brad.crypto, brad.zil)", "")
    if not st.button("Resolve"):
        return
    if not domain.strip():
        st.error("Please enter a domain.")
        st.stop()
        return

    try:
        result = lookup(resolution, domain)
    except (ResolutionError, ConfigurationError) as e:
        st.error(f"❌ {e}")
        return

    st.success(f"✅ {result['domain']} resolved via {result['service']}")
    st.markdown(f"**Owner**: `{result['owner']}` ({format_address(result['owner'])})")
    if result["resolver"]:
        st.markdown(f"**Resolver**: `{result['resolver']}`")
    else:
        st.warning("No resolver set, records are unavailable")
    st.markdown(f"**Namehash**: `{result['namehash']}`")

    tabs = st.tabs(["📜 Records", "🌍 DNS", "📍 Location"])
    with tabs[0]:
        st.dataframe(records_frame(result["records"]))
    with tabs[1]:
        if result["dns"]:
            st.dataframe(dns_frame(result["dns"]))
        else:
            st.info("No DNS records")
    with tabs[2]:
        if result["location"]:
            st.json(result["location"])
        else:
            st.info("No location information")


if __name__ == "__main__":
    main()
