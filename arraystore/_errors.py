# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from typing import Any, ClassVar

__all__ = (
    "StoreError",
    "CallbackError",
    "KeyExtractionError",
    "ProcessorError",
)


class StoreError(Exception):
    default_message: ClassVar[str] = "ArrayStore error"
    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str | None = None,
        *,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message or self.default_message)
        if cause:
            self.__cause__ = cause  # preserves traceback
        self.message = message or self.default_message
        self.details = details or {}

    def to_dict(self, *, include_cause: bool = False) -> dict[str, Any]:
        data = {
            "error": self.__class__.__name__,
            "message": self.message,
            **({"details": self.details} if self.details else {}),
        }
        if include_cause and (cause := self.get_cause()):
            data["cause"] = repr(cause)
        return data

    def get_cause(self) -> Exception | None:
        """Get the cause of this error, if any."""
        return self.__cause__ if hasattr(self, "__cause__") else None


class CallbackError(StoreError):
    """A user supplied callback raised while the store was adding an object.

    These are never raised out of a store operation. The store builds one,
    hands it to its report path and carries on with the documented fallback.
    """

    default_message = "Store callback failed"
    callback_name: ClassVar[str] = "callback"
    __slots__ = ()

    @classmethod
    def from_failure(
        cls,
        store_id: Any,
        object_id: Any,
        cause: Exception,
    ):
        details = {
            "store_id": str(store_id),
            "object_id": object_id,
            "callback": cls.callback_name,
        }
        message = (
            f"ArrayStore #{store_id} failed to run the {cls.callback_name} "
            f"for object {object_id!r}: {cause!r}"
        )
        return cls(message, details=details, cause=cause)

    @property
    def store_id(self) -> str | None:
        return self.details.get("store_id")

    @property
    def object_id(self) -> Any:
        return self.details.get("object_id")


class KeyExtractionError(CallbackError):
    """The object uid getter raised; the raw ``id`` field was used instead."""

    default_message = "Failed to get the object uid"
    callback_name = "object uid getter"
    __slots__ = ()


class ProcessorError(CallbackError):
    """The before-add processor raised; the object was added unprocessed."""

    default_message = "Failed to run the before-add processor"
    callback_name = "before-add processor"
    __slots__ = ()
