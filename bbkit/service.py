"""Schema service — resolves operation ids to their contracts and input schemas."""

import logging
from collections.abc import Mapping
from typing import Any, Protocol

from bbkit.contracts import default_registry
from bbkit.models import OperationContract
from bbkit.schemas.base import ValidationSchema


class LoggerLike(Protocol):
    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None: ...

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None: ...

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None: ...

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None: ...


class SchemaNotFoundError(LookupError):
    def __init__(self, operation_id: str) -> None:
        super().__init__(f"Schema not found for operation {operation_id}")
        self.operation_id = operation_id


class SchemaService:
    """Resolves operation ids against a read-only contract mapping.

    Lookups are ``async`` so a remote schema source can be swapped in later; the
    built-in registry answers immediately without awaiting anything.
    """

    def __init__(
        self,
        contracts: Mapping[str, OperationContract] | None = None,
        logger: LoggerLike | None = None,
    ) -> None:
        self._contracts = contracts if contracts is not None else default_registry()
        self._logger = logger or logging.getLogger(__name__)

    def _resolve(self, operation_id: str) -> OperationContract:
        contract = self._contracts.get(operation_id)
        if contract is None:
            self._logger.warning("Schema not found", extra={"operation_id": operation_id})
            raise SchemaNotFoundError(operation_id)
        self._logger.debug("Resolved operation", extra={"operation_id": operation_id})
        return contract

    async def get_schema(self, operation_id: str) -> ValidationSchema:
        return self._resolve(operation_id).schema

    async def get_operation(self, operation_id: str) -> OperationContract:
        return self._resolve(operation_id)

    def list_operation_ids(self) -> list[str]:
        return list(self._contracts.keys())
