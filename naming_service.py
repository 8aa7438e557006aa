from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence

from resolution_errors import ResolutionError, ResolutionErrorCode


class NamingServiceName(str, Enum):
    UNS = "UNS"
    ZNS = "ZNS"


class BlockchainType(str, Enum):
    ETH = "ETH"
    MATIC = "MATIC"
    ZIL = "ZIL"


@dataclass
class DomainData:
    owner: str = ""
    resolver: str = ""
    records: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Location:
    registry_address: str
    resolver_address: str
    network_id: int
    blockchain: BlockchainType
    owner_address: str
    blockchain_provider_url: Optional[str]


def run_concurrently(calls: Sequence[Callable[[], object]]) -> List[object]:
    """Run zero-arg callables in parallel; results keep input order.

    Fails fast: the first call to raise has its exception re-raised as soon
    as it settles.
    """
    if not calls:
        return []
    if len(calls) == 1:
        return [calls[0]()]
    with ThreadPoolExecutor(max_workers=min(len(calls), 16)) as pool:
        futures = [pool.submit(call) for call in calls]
        done, pending = wait(futures, return_when=FIRST_EXCEPTION)
        for future in futures:
            if future in done and future.exception() is not None:
                for other in pending:
                    other.cancel()
                raise future.exception()
        return [future.result() for future in futures]


class NamingService:
    """Capability set every naming family implements."""

    name: NamingServiceName

    def service_name(self) -> NamingServiceName:
        return self.name

    def is_supported_domain(self, domain: str) -> bool:
        raise NotImplementedError

    def namehash(self, domain: str) -> str:
        raise NotImplementedError

    def childhash(self, parent: str, label: str) -> str:
        raise NotImplementedError

    def owner(self, domain: str) -> str:
        raise NotImplementedError

    def resolver(self, domain: str) -> str:
        raise NotImplementedError

    def records(self, domain: str, keys: Sequence[str]) -> Dict[str, str]:
        raise NotImplementedError

    def all_records(self, domain: str) -> Dict[str, str]:
        raise NotImplementedError

    def twitter(self, domain: str) -> str:
        raise NotImplementedError

    def is_registered(self, domain: str) -> bool:
        raise NotImplementedError

    def registry_address(self, domain: str) -> str:
        raise NotImplementedError

    def locations(self, domains: Sequence[str]) -> Dict[str, Optional[Location]]:
        raise NotImplementedError

    def get_token_uri(self, token_id: str) -> str:
        raise NotImplementedError

    def record(self, domain: str, key: str) -> str:
        records = self.records(domain, [key])
        return self.ensure_record_presence(domain, key, records.get(key))

    def is_available(self, domain: str) -> bool:
        return not self.is_registered(domain)

    @staticmethod
    def ensure_record_presence(domain: str, key: str, value: Optional[str]) -> str:
        if not value:
            raise ResolutionError(ResolutionErrorCode.RECORD_NOT_FOUND, domain=domain, record_name=key)
        return value

    def _ensure_supported(self, domain: str) -> None:
        if not self.is_supported_domain(domain):
            raise ResolutionError(ResolutionErrorCode.UNSUPPORTED_DOMAIN, domain=domain)

    def _unsupported(self, method_name: str, domain: str = "") -> ResolutionError:
        return ResolutionError(
            ResolutionErrorCode.UNSUPPORTED_METHOD,
            method_name=method_name,
            domain=domain or self.name.value,
        )
