# ============================================================
# Resolution errors
# Every public operation either returns a value or raises one of these.
# ============================================================

from enum import Enum


class ResolutionErrorCode(str, Enum):
    UNSUPPORTED_DOMAIN = "UnsupportedDomain"
    UNSUPPORTED_SERVICE = "UnsupportedService"
    UNSUPPORTED_METHOD = "UnsupportedMethod"
    UNREGISTERED_DOMAIN = "UnregisteredDomain"
    UNSPECIFIED_RESOLVER = "UnspecifiedResolver"
    RECORD_NOT_FOUND = "RecordNotFound"
    INVALID_TWITTER_VERIFICATION = "InvalidTwitterVerification"
    SERVICE_PROVIDER_ERROR = "ServiceProviderError"


class ConfigurationErrorCode(str, Enum):
    UNSUPPORTED_NETWORK = "UnsupportedNetwork"
    INVALID_CONFIGURATION_FIELD = "InvalidConfigurationField"
    CUSTOM_NETWORK_CONFIG_MISSING = "CustomNetworkConfigMissing"
    INCORRECT_BLOCKCHAIN_PROVIDER = "IncorrectBlockchainProvider"


class DnsRecordsErrorCode(str, Enum):
    INCONSISTENT_TTL = "InconsistentTtl"
    DNS_RECORD_NOT_SUPPORTED = "DnsRecordNotSupported"


RESOLUTION_MESSAGES = {
    ResolutionErrorCode.UNSUPPORTED_DOMAIN: "Domain {domain} is not supported",
    ResolutionErrorCode.UNSUPPORTED_SERVICE: "Naming service {naming_service} is not supported",
    ResolutionErrorCode.UNSUPPORTED_METHOD: "Method {method_name} is not supported for {domain}",
    ResolutionErrorCode.UNREGISTERED_DOMAIN: "Domain {domain} is not registered",
    ResolutionErrorCode.UNSPECIFIED_RESOLVER: "Domain {domain} is not configured",
    ResolutionErrorCode.RECORD_NOT_FOUND: "No {record_name} record found for {domain}",
    ResolutionErrorCode.INVALID_TWITTER_VERIFICATION: "Domain {domain} has invalid Twitter signature verification",
    ResolutionErrorCode.SERVICE_PROVIDER_ERROR: "< {provider_message} >",
}

CONFIGURATION_MESSAGES = {
    ConfigurationErrorCode.UNSUPPORTED_NETWORK: "Unsupported network in Resolution library configuration for {method}",
    ConfigurationErrorCode.INVALID_CONFIGURATION_FIELD: "Incorrect configuration field {field} for {method}",
    ConfigurationErrorCode.CUSTOM_NETWORK_CONFIG_MISSING: "Missing configuration in Resolution {method}. Please specify {config} when using a custom network",
    ConfigurationErrorCode.INCORRECT_BLOCKCHAIN_PROVIDER: "Provider {provider} is not supported, expected a url, a web3 provider or a request callable",
}

DNS_MESSAGES = {
    DnsRecordsErrorCode.INCONSISTENT_TTL: "Inconsistent TTL values for {record_type} records",
    DnsRecordsErrorCode.DNS_RECORD_NOT_SUPPORTED: "DNS record type {record_type} is not supported",
}


class _SafeContext(dict):
    def __missing__(self, key):
        return ""


class _CodedError(Exception):
    messages: dict = {}

    def __init__(self, code, **context):
        self.code = code
        self.context = context
        message = self.messages[code].format_map(_SafeContext(context))
        super().__init__(" ".join(message.split()))


class ResolutionError(_CodedError):
    """Raised for any failure while resolving a domain."""
    messages = RESOLUTION_MESSAGES

    @property
    def domain(self):
        return self.context.get("domain")


class ConfigurationError(_CodedError):
    """Raised synchronously while building a naming service, before any network call."""
    messages = CONFIGURATION_MESSAGES


class DnsRecordsError(_CodedError):
    messages = DNS_MESSAGES
