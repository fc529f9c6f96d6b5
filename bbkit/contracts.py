"""Operation contract registry.

Maps stable operation ids (``bitbucket.pull-requests.create``) to their
``OperationContract``. Built once from the static definitions under
``bbkit.schemas`` and read-only afterwards.
"""

from collections.abc import Iterable, Iterator, Mapping
from functools import lru_cache
from types import MappingProxyType

from bbkit.models import OperationContract
from bbkit.schemas import commits, datacenter, issues, pipelines, pull_requests, repositories, workspaces

# Definition order is listing order.
_SOURCES = (pull_requests, repositories, commits, issues, pipelines, workspaces, datacenter)


class ContractRegistry(Mapping[str, OperationContract]):
    def __init__(self, contracts: Iterable[OperationContract]) -> None:
        entries: dict[str, OperationContract] = {}
        for contract in contracts:
            if contract.id in entries:
                raise ValueError(f"Duplicate operation id: {contract.id}")
            entries[contract.id] = contract
        self._contracts = MappingProxyType(entries)

    def __getitem__(self, operation_id: str) -> OperationContract:
        return self._contracts[operation_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._contracts)

    def __len__(self) -> int:
        return len(self._contracts)

    def get(self, operation_id: str, default: OperationContract | None = None) -> OperationContract | None:  # type: ignore[override]
        return self._contracts.get(operation_id, default)

    def keys(self) -> list[str]:  # type: ignore[override]
        return list(self._contracts)


def builtin_contracts() -> list[OperationContract]:
    return [contract for source in _SOURCES for contract in source.CONTRACTS]


@lru_cache(maxsize=1)
def default_registry() -> ContractRegistry:
    """Build the production registry on first use; the same instance is returned after."""
    return ContractRegistry(builtin_contracts())
