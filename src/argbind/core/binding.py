"""Handler bindings: the edge from one concrete shape to its handler.

A binding is created at registration time, when both the shape and the
handler are known, so dispatch never has to discover the execution
method of a handler whose exact type it does not know.
"""

from __future__ import annotations

import inspect
from typing import Any

from argbind.exceptions import HandlerContractError
from argbind.utils.log import get_logger
from argbind.utils.typenames import type_name, type_name_of

logger = get_logger(__name__)

EXECUTE_METHOD = "execute"


class HandlerBinding:
    """Lazily resolved handler for exactly one options or verb shape.

    Parameters
    ----------
    shape:
        The concrete options or verb class this binding serves.
    handler:
        Either a handler instance, or a handler class that is instantiated
        without arguments the first time it is needed.

    Raises
    ------
    HandlerContractError
        If *handler* does not expose a callable ``execute``.
    """

    def __init__(self, shape: type, handler: Any) -> None:
        self._shape: type = shape
        if isinstance(handler, type):
            self._handler_shape: type = handler
            self._instance: Any = None
        else:
            self._handler_shape = type(handler)
            self._instance = handler

        if not callable(getattr(handler, EXECUTE_METHOD, None)):
            logger.error(
                "handler_contract_violation",
                handler_type=type_name(self._handler_shape),
                verb_type=type_name(shape),
            )
            raise HandlerContractError(
                f"Handler {type_name(self._handler_shape)} does not expose an "
                f"'{EXECUTE_METHOD}' method for {type_name(shape)}.",
                hint=f"Define 'async def {EXECUTE_METHOD}(self, verb)' on the handler.",
            )

    @property
    def shape(self) -> type:
        return self._shape

    @property
    def handler_shape(self) -> type:
        return self._handler_shape

    def resolve(self) -> Any:
        """Return the handler instance, creating it on first use."""
        if self._instance is None:
            self._instance = self._handler_shape()
        return self._instance

    async def dispatch(self, instance: Any) -> None:
        """Invoke the handler's ``execute`` with *instance* and await it."""
        handler = self.resolve()
        logger.debug(
            "dispatching",
            verb_type=type_name_of(instance),
            handler_type=type_name(self._handler_shape),
        )
        result = handler.execute(instance)
        if inspect.isawaitable(result):
            await result

    def __repr__(self) -> str:
        return f"HandlerBinding({type_name(self._shape)} -> {type_name(self._handler_shape)})"
