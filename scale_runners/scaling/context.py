"""Per-invocation logging context."""

import logging
import uuid
from collections.abc import MutableMapping
from typing import Any


class InvocationLogger(logging.LoggerAdapter):
    """Logger adapter carrying the fields of one scale-up invocation.

    A new adapter is created for every event and passed down explicitly, so
    concurrent invocations never share context. Fields are appended to the
    message and also exposed as ``extra`` attributes for structured handlers.
    """

    def __init__(self, logger: logging.Logger, **fields: Any) -> None:
        fields.setdefault("correlation_id", str(uuid.uuid4())[:8])
        super().__init__(logger, fields)

    @property
    def fields(self) -> dict[str, Any]:
        return dict(self.extra or {})

    def bind(self, **fields: Any) -> "InvocationLogger":
        """Return a new adapter with additional fields."""
        merged = {**self.fields, **fields}
        return InvocationLogger(self.logger, **merged)

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        fields = self.fields
        kwargs["extra"] = {**fields, **kwargs.get("extra", {})}
        rendered = " ".join(
            f"{key}={value}" for key, value in fields.items() if value is not None
        )
        return f"{msg} [{rendered}]", kwargs
