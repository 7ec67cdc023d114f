"""
Dispatcher - the single entry point for executing admin operations.

Resolves an incoming (name, arguments) pair against the registry:

    caller → Dispatcher.dispatch(name, arguments)
               ├─ lookup      → UnknownOperation   (no handler runs)
               ├─ validation  → InvalidArguments   (no store access)
               └─ execution   → handler(**kwargs)  → result / NotFound / StoreError

Lookup and validation are synchronous and finish before the handler
coroutine is created, so a rejected call never has a side effect.
Errors raised by a handler keep their type and get the operation name
stamped on them; anything that is not an ActionError is wrapped in
StoreError.

There is no timeout, retry or locking here: a dispatch inherits whatever the
store calls do, and a store failure is terminal for that call.
"""

import json
import time
import uuid
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic.alias_generators import to_snake

from tutor_admin.ai.actions.catalog import OperationDescriptor
from tutor_admin.ai.actions.registry import ActionRegistry
from tutor_admin.ai.monitoring.logger import ActionLogger, action_logger
from tutor_admin.ai.monitoring.metrics import ActionMetrics, action_metrics
from tutor_admin.core.exceptions import (
    ActionError,
    InvalidArguments,
    StoreError,
    UnknownOperation,
)


class Dispatcher:
    """
    Validates and executes operations from the admin catalog.

    Usage:
        dispatcher = Dispatcher(build_registry(AdminActions(store)))

        tools = dispatcher.tool_schemas()
        result = await dispatcher.dispatch("banUser", {"userId": "u-1"})
    """

    def __init__(
        self,
        registry: ActionRegistry,
        logger: Optional[ActionLogger] = None,
        metrics: Optional[ActionMetrics] = None,
    ):
        self.registry = registry
        self.logger = logger or action_logger
        self.metrics = metrics or action_metrics

    # -------------------------------------------------------------------------
    # DISCOVERY
    # -------------------------------------------------------------------------

    def list_operations(self) -> List[OperationDescriptor]:
        return self.registry.list_actions()

    def tool_schemas(self) -> List[Dict[str, Any]]:
        return self.registry.to_tool_schemas()

    # -------------------------------------------------------------------------
    # VALIDATION
    # -------------------------------------------------------------------------

    def resolve(self, name: str, arguments: Any) -> Tuple[OperationDescriptor, Dict[str, Any]]:
        """
        Look up and validate a call without executing it.

        Parameters not declared by the operation are dropped. Returned
        kwargs use the handler's snake_case argument names.

        Raises:
            UnknownOperation: name not in the catalog
            InvalidArguments: arguments missing, mistyped or out of range
        """
        descriptor = self.registry.get_action(name)
        if descriptor is None:
            raise UnknownOperation(f"Unknown operation: {name}", operation=name)

        if arguments is None:
            arguments = {}
        if not isinstance(arguments, Mapping):
            raise InvalidArguments("Arguments must be a JSON object", operation=name)

        is_valid, error = descriptor.validate(dict(arguments))
        if not is_valid:
            raise InvalidArguments(error, operation=name)

        kwargs = {
            to_snake(param.name): arguments[param.name]
            for param in descriptor.parameters
            if arguments.get(param.name) is not None
        }
        return descriptor, kwargs

    # -------------------------------------------------------------------------
    # EXECUTION
    # -------------------------------------------------------------------------

    async def dispatch(self, name: str, arguments: Optional[Mapping[str, Any]] = None) -> Any:
        """
        Execute one operation.

        Returns:
            The handler's confirmation string unchanged, or the list returned
            by a listing operation (scanUsers, getRecentLogs)

        Raises:
            UnknownOperation, InvalidArguments, NotFound, StoreError - each
            carrying the operation name
        """
        request_id = uuid.uuid4().hex[:12]
        start = time.perf_counter()
        self.logger.log_dispatch(request_id, name, dict(arguments) if isinstance(arguments, Mapping) else None)

        stage = "lookup"
        try:
            if not self.registry.has_action(name):
                raise UnknownOperation(f"Unknown operation: {name}", operation=name)

            stage = "validation"
            _, kwargs = self.resolve(name, arguments)

            stage = "execution"
            handler = self.registry.get_handler(name)
            result = await handler(**kwargs)

        except ActionError as e:
            if e.operation is None:
                e.operation = name
            self._record_failure(request_id, name, e, stage, start)
            raise
        except Exception as e:
            wrapped = StoreError(f"{type(e).__name__}: {e}", operation=name)
            self._record_failure(request_id, name, wrapped, stage, start)
            raise wrapped from e

        latency_ms = (time.perf_counter() - start) * 1000
        self.logger.log_result(request_id, name, result, latency_ms)
        self.metrics.record_call(name, latency_ms, success=True)
        return result

    async def execute_tool_call(self, name: str, raw_arguments: Union[str, Mapping[str, Any], None]) -> Any:
        """
        Execute a tool call as emitted by a chat-completion backend.

        raw_arguments is the JSON text of the arguments object (a mapping is
        accepted as-is). Malformed JSON is an InvalidArguments failure.
        """
        if isinstance(raw_arguments, str):
            text = raw_arguments.strip()
            try:
                arguments = json.loads(text) if text else {}
            except json.JSONDecodeError as e:
                raise InvalidArguments(f"Arguments are not valid JSON: {e.msg}", operation=name) from e
        else:
            arguments = raw_arguments

        return await self.dispatch(name, arguments)

    def _record_failure(self, request_id: str, name: str, error: ActionError, stage: str, start: float) -> None:
        latency_ms = (time.perf_counter() - start) * 1000
        self.logger.log_error(request_id, name, error, stage, latency_ms)
        self.metrics.record_call(name, latency_ms, success=False, error_type=type(error).__name__)
