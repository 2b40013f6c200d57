from sys import *
import types
import struct
import logging
import threading
from .typing import Any, Callable, ClassVar, NamedTuple, Measurable, overload


logger = logging.getLogger(__name__)




# [ Platform ]

POINTER_SIZE = struct.calcsize('P')
# buffer pointer, capacity, length
VEC_HANDLE_SIZE = 3 * POINTER_SIZE
# buffer pointer, length
BOXED_SLICE_HANDLE_SIZE = 2 * POINTER_SIZE




# [ Capability ]

class GetSize:
    """Base class for types that can report how many bytes their
    instances occupy.

    Two numbers are reported per value:

        * dynamic footprint: bytes of heap memory owned exclusively by
        the value, not counting the value's own (inline) storage.

        * total footprint: `INLINE_SIZE + dynamic footprint`.

    A subclass that never owns heap memory only needs to set
    `INLINE_SIZE`. A subclass that can own heap memory must set
    `USES_DYNAMIC_MEMORY` to True and override `dynamic_footprint`.
    `total_footprint` is derived and must not be overridden.

    `USES_DYNAMIC_MEMORY` describes the type, not a value. It may be
    True for a type whose current values own nothing (an empty vector),
    but it may never be False for a type that can own heap memory;
    containers skip walking their items when it is False.
    """
    __slots__ = ()

    INLINE_SIZE: ClassVar[int]
    USES_DYNAMIC_MEMORY: ClassVar[bool] = False

    def dynamic_footprint(self) -> int:
        """Return the number of heap bytes owned by this value."""
        return 0

    def total_footprint(self) -> int:
        """Return the number of bytes occupied by this value, including
        the heap memory it owns."""
        return type(self).INLINE_SIZE + self.dynamic_footprint()




# [ Foreign Types ]

class _SizeInfo(NamedTuple):
    inline_size: int
    dynamic    : Callable[[Any], int] | None

    @property
    def uses_dynamic_memory(self) -> bool:
        return self.dynamic is not None


_LOCK = threading.Lock()
_REGISTRY: dict[type, _SizeInfo] = {}


def register(tp: type, inline_size: int, dynamic: Callable[[Any], int] | None = None) -> None:
    """Allow instances of a class that does not derive from `GetSize`
    to be measured.

    Args:
        * tp: The class to register. Subclasses of *tp* are measured
        the same way unless registered themselves.

        * inline_size: Bytes occupied by an instance of *tp* where it is
        stored directly.

        * dynamic: Called with an instance of *tp*; returns the heap
        bytes the instance owns. When provided, *tp* is considered to
        use dynamic memory. When omitted, instances of *tp* never own
        heap memory.


    Registering an existing class again replaces its entry.
    """
    if not isinstance(tp, type):
        raise TypeError(f"expected a class, got {type(tp).__name__!r} object")
    if issubclass(tp, GetSize):
        raise TypeError(f"{tp.__name__!r} already derives from 'GetSize'")
    if not isinstance(inline_size, int) or isinstance(inline_size, bool):
        raise TypeError(f"inline size must be an integer, got {type(inline_size).__name__!r}")
    if inline_size < 0:
        raise ValueError(f"inline size must be non-negative, got {inline_size}")
    if dynamic is not None and not callable(dynamic):
        raise TypeError(f"{type(dynamic).__name__!r} object is not callable")

    with _LOCK:
        _REGISTRY[tp] = _SizeInfo(inline_size, dynamic)
    logger.debug("registered %r (inline_size=%d, dynamic=%s)", tp, inline_size, dynamic is not None)


def unregister(tp: type) -> None:
    """Remove a class registered with `register`. Raises `KeyError` if
    *tp* is not registered."""
    with _LOCK:
        del _REGISTRY[tp]
    logger.debug("unregistered %r", tp)


def _lookup(tp: type) -> _SizeInfo | None:
    with _LOCK:
        for base in tp.__mro__:
            try:
                return _REGISTRY[base]
            except KeyError:
                pass
    return None


register(bool, 1)
register(float, 8)
register(types.NoneType, 0)




# [ Queries ]

def _as_type(obj: Any) -> type:
    return obj if isinstance(obj, type) else type(obj)


def implements_getsize(obj: Any, /) -> bool:
    """Return True if *obj* (a class or an instance) can be measured."""
    tp = _as_type(obj)
    return issubclass(tp, GetSize) or _lookup(tp) is not None


def _unsupported(tp: type) -> TypeError:
    return TypeError(f"cannot measure object of type {tp.__name__!r}")


@overload
def sizeof(obj: type[Any], /) -> int: ...
@overload
def sizeof(obj: Measurable, /) -> int: ...
def sizeof(obj: Any, /) -> int:
    """Return the inline footprint of *obj*'s type, or of *obj* when
    it is a class.

    The inline footprint is the same for every instance of a class;
    it does not include heap memory owned by the instance.
    """
    tp = _as_type(obj)
    if issubclass(tp, GetSize):
        try:
            return tp.INLINE_SIZE
        except AttributeError:
            raise TypeError(f"{tp.__name__!r} has no fixed inline size") from None
    info = _lookup(tp)
    if info is None:
        raise _unsupported(tp)
    return info.inline_size


def uses_dynamic_memory(obj: Any, /) -> bool:
    """Return True if instances of *obj*'s type (or of *obj*, when it
    is a class) could own heap memory."""
    tp = _as_type(obj)
    if issubclass(tp, GetSize):
        return tp.USES_DYNAMIC_MEMORY
    info = _lookup(tp)
    if info is None:
        raise _unsupported(tp)
    return info.uses_dynamic_memory


def dynamic_footprint(obj: Measurable, /) -> int:
    """Return the number of heap bytes owned by *obj*."""
    if isinstance(obj, GetSize):
        return obj.dynamic_footprint()
    tp = type(obj)
    info = _lookup(tp)
    if info is None:
        raise _unsupported(tp)
    if info.dynamic is None:
        return 0
    return info.dynamic(obj)


def total_footprint(obj: Measurable, /) -> int:
    """Return the number of bytes occupied by *obj*, including the heap
    memory it owns."""
    if isinstance(obj, GetSize):
        return obj.total_footprint()
    return sizeof(obj) + dynamic_footprint(obj)
