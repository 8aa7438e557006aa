# ============================================================
# Blockchain providers
# Every accepted provider shape is normalized here into one
# request(method, params) capability.
# ============================================================

import itertools
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

import requests
from eth_abi import decode, encode
from web3 import Web3
from web3.providers.base import BaseProvider

from resolution_errors import (
    ConfigurationError,
    ConfigurationErrorCode,
    ResolutionError,
    ResolutionErrorCode,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10
JSONRPC_VERSION = "2.0"


def _provider_error(message, method_name):
    return ResolutionError(
        ResolutionErrorCode.SERVICE_PROVIDER_ERROR,
        provider_message=message,
        method_name=method_name,
    )


def _unwrap_response(response, method):
    if not isinstance(response, dict):
        raise _provider_error(f"Malformed JSON-RPC response: {response!r}", method)
    if response.get("error"):
        error = response["error"]
        message = error.get("message", error) if isinstance(error, dict) else error
        raise _provider_error(message, method)
    return response.get("result")


class RpcProvider:
    url: Optional[str] = None

    def request(self, method: str, params: Sequence[Any]) -> Any:
        raise NotImplementedError


class HttpProvider(RpcProvider):
    """Plain JSON-RPC over HTTP POST."""

    _ids = itertools.count(1)

    def __init__(self, url: str, timeout: float = DEFAULT_TIMEOUT):
        self.url = url
        self.timeout = timeout

    def request(self, method, params):
        payload = {"jsonrpc": JSONRPC_VERSION, "id": next(self._ids), "method": method, "params": list(params)}
        logger.debug("POST %s %s", self.url, method)
        try:
            res = requests.post(self.url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise _provider_error(str(e), method) from e
        if res.status_code != 200:
            raise _provider_error(f"HTTP {res.status_code}: {res.text[:200]}", method)
        try:
            data = res.json()
        except ValueError as e:
            raise _provider_error(f"Invalid JSON response: {res.text[:200]}", method) from e
        return _unwrap_response(data, method)


class Web3Provider(RpcProvider):
    """Wraps a Web3 instance or any web3 provider exposing make_request."""

    def __init__(self, provider):
        if isinstance(provider, Web3):
            provider = provider.provider
        self.provider = provider
        self.url = getattr(provider, "endpoint_uri", None)

    def request(self, method, params):
        logger.debug("web3 %s", method)
        try:
            response = self.provider.make_request(method, list(params))
        except ResolutionError:
            raise
        except Exception as e:
            raise _provider_error(str(e), method) from e
        return _unwrap_response(dict(response), method)


class CallableProvider(RpcProvider):
    """Wraps a plain function(method, params) -> result."""

    def __init__(self, fn: Callable[[str, list], Any], url: Optional[str] = None):
        self.fn = fn
        self.url = url

    def request(self, method, params):
        return self.fn(method, list(params))


def as_provider(source, url: Optional[str] = None) -> RpcProvider:
    if isinstance(source, RpcProvider):
        return source
    if isinstance(source, str):
        return HttpProvider(source)
    if isinstance(source, (Web3, BaseProvider)) or hasattr(source, "make_request"):
        return Web3Provider(source)
    if callable(source):
        return CallableProvider(source, url)
    raise ConfigurationError(
        ConfigurationErrorCode.INCORRECT_BLOCKCHAIN_PROVIDER,
        provider=type(source).__name__,
    )


# ============================================================
# Contracts
# ABI entries are (input types, output types) per method name.
# ============================================================
def function_selector(name: str, inputs: Sequence[str]) -> bytes:
    return bytes(Web3.keccak(text=f"{name}({','.join(inputs)})"))[:4]


def event_topic(signature: str) -> str:
    return "0x" + bytes(Web3.keccak(text=signature)).hex()


def _hex_to_bytes(value) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    value = value[2:] if value.startswith("0x") else value
    return bytes.fromhex(value)


def _uint256_topic(value: int) -> str:
    return "0x" + value.to_bytes(32, "big").hex()


class Contract:
    def __init__(self, provider: RpcProvider, address: str, abi: Dict[str, tuple], events: Optional[Dict[str, str]] = None):
        self.provider = provider
        self.address = address
        self.abi = abi
        self.events = events or {}

    def call(self, method: str, args: Sequence[Any]) -> tuple:
        inputs, outputs = self.abi[method]
        data = function_selector(method, inputs) + encode(list(inputs), list(args))
        result = self.provider.request("eth_call", [{"to": self.address, "data": "0x" + data.hex()}, "latest"])
        raw = _hex_to_bytes(result or "0x")
        if not raw:
            raise _provider_error(f"Empty result for {method} on {self.address}", method)
        return decode(list(outputs), raw)

    def fetch_logs(self, event_name: str, token_id: int, from_block: str = "earliest") -> List[dict]:
        topics = [event_topic(self.events[event_name]), _uint256_topic(token_id)]
        logs = self.provider.request("eth_getLogs", [{
            "address": self.address,
            "topics": topics,
            "fromBlock": from_block,
            "toBlock": "latest",
        }])
        return logs or []
