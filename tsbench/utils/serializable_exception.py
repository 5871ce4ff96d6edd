"""
SerializableException: the base class for all custom exceptions in the tsbench
project. It can be turned into a plain dictionary (to be logged as structured
data, or shipped to another process) and re-created from that dictionary as
the same exception class.

Usage:

>>> from tsbench.utils.serializable_exception import SerializableException
>>>
>>> class MyException(SerializableException):
>>>     pass
>>>
>>> try:
>>>     raise MyException(
>>>         message="this is a message",
>>>         should_report=False # this should not be reported to sentry
>>>     )
>>> except SerializableException as e:
>>>     logger.error("failed", **e.to_dict())
>>>
>>> recvd_exception = SerializableException.from_dict(payload)
>>> assert isinstance(recvd_exception, MyException)
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Type, TypedDict, Union, cast

import rapidjson

# mypy has not figured out recursive types yet so this can't be totally typesafe
JsonSerializable = Union[str, int, float, bool, None, Dict[str, Any], List[Any]]


class SerializableExceptionDict(TypedDict):
    __type__: str
    __name__: str
    __message__: str
    __extra_data__: Dict[str, JsonSerializable]
    __should_report__: bool


class _ExceptionRegistry:
    """Keep a mapping of SerializableExceptions to their names"""

    def __init__(self) -> None:
        self.__mapping: Dict[str, Type["SerializableException"]] = {}

    def register_class(self, cls: Type["SerializableException"]) -> None:
        existing_class = self.__mapping.get(cls.__name__)
        if not existing_class:
            self.__mapping[cls.__name__] = cls

    def get_class_by_name(
        self, cls_name: str
    ) -> Optional[Type["SerializableException"]]:
        return self.__mapping.get(cls_name)


_REGISTRY: _ExceptionRegistry | None = None


def _get_registry() -> _ExceptionRegistry:
    global _REGISTRY
    if not _REGISTRY:
        _REGISTRY = _ExceptionRegistry()
    return _REGISTRY


class SerializableException(Exception):
    """
    NOTE: If an exception subclasses SerializableException, ensure that
    you don't provide its own constructor. Use the extra_data keyword
    arguments to pass any additional arguments instead. If you provide your
    own constructor then it would have problems re-creating the exception
    from a serialized version.
    """

    def __init__(
        self,
        message: Optional[str] = None,
        should_report: bool = True,
        **extra_data: JsonSerializable,
    ) -> None:
        self.extra_data = extra_data or {}
        self.message = message or ""
        # whether or not the error should be reported to sentry
        self.should_report = should_report
        super().__init__(self.message)

    def to_dict(self) -> SerializableExceptionDict:
        return {
            "__type__": "SerializableException",
            "__name__": self.__class__.__name__,
            "__message__": self.message,
            "__should_report__": self.should_report,
            "__extra_data__": self.extra_data,
        }

    @classmethod
    def from_dict(cls, edict: SerializableExceptionDict) -> "SerializableException":
        assert edict["__type__"] == "SerializableException"
        defined_exception = _get_registry().get_class_by_name(edict.get("__name__", ""))

        if defined_exception is not None:
            return defined_exception(
                message=edict.get("__message__", ""),
                should_report=edict.get("__should_report__", True),
                **edict.get("__extra_data__", {}),
            )
        # an exception that is not in the registry becomes a new type with
        # the same name and message
        return cast(
            SerializableException,
            type(edict["__name__"], (cls,), {})(
                message=edict.get("__message__", ""),
                should_report=edict.get("__should_report__", True),
                **edict.get("__extra_data__", {}),
            ),
        )

    def __init_subclass__(cls) -> None:
        # NOTE: called when a subclass is **DEFINED**, which is how every
        # tsbench exception ends up in the registry
        _get_registry().register_class(cls)
        return super().__init_subclass__()

    @classmethod
    def from_standard_exception_instance(
        cls, exc: Exception
    ) -> "SerializableException":
        if isinstance(exc, cls):
            return exc
        return cls.from_dict(
            {
                "__type__": "SerializableException",
                "__name__": exc.__class__.__name__,
                "__message__": str(exc),
                "__extra_data__": {"from_standard_exception": True},
                "__should_report__": True,
            }
        )

    def __repr__(self) -> str:
        result: str = rapidjson.dumps(self.to_dict(), indent=2)
        return result
