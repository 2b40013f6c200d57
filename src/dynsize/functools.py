from functools import *
from .typing import overload, T_co, Any, Callable, Generic, Self




class classproperty(Generic[T_co]):
    """Creates class-bound, read-only properties.

    The getter receives the owning class, whether the attribute is
    looked up on the class itself or on one of its instances. Once
    set, accessing the actual descriptor object can be difficult. To
    do so, use `getattr_static` function from the `inspect` module.
    """

    __slots__ = ('fget',)

    def __init__(self, fget: Callable[[Any], T_co]):
        self.fget = fget

    @overload
    def __get__(self, inst: Any, cls: type[Any] | None, /) -> T_co: ...
    @overload
    def __get__(self, inst: None, cls: None, /) -> Self: ...
    def __get__(self, inst: Any, cls: type[Any] | None = None):
        if cls is None:
            if inst is None:
                return self
            cls = type(inst)
        return self.fget(cls)

    def __set__(self, inst: Any, value: Any) -> None:
        raise AttributeError(f"cannot set read-only class attribute of {type(inst).__name__!r} object")
