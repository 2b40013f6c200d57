import sys
import logging
import operator
import reprlib
import threading
from collections import *  # pyright: ignore[reportAssignmentType]
from .._shared import AbstractComposition
from ..functools import classproperty
from ..sys import (
    GetSize,
    VEC_HANDLE_SIZE,
    BOXED_SLICE_HANDLE_SIZE,
    implements_getsize,
    sizeof,
    uses_dynamic_memory,
    dynamic_footprint,
    total_footprint,
)
from ..typing import (
    overload,
    Any,
    ClassVar,
    SupportsIndex,
    Iterable,
    Iterator,
    Protocol,
    Self,
    TypeVar,
    T,
    T_co,
)


logger = logging.getLogger(__name__)








# [Composition ABCs]

# The below ABCs are lightweight wrappers around a list found on an
# instance's `_object_value_` attribute, broken out by behavior. Values
# entering the list always pass through `._format_value`; containers
# use it to convert values into their element type.

class ComposedCollection(AbstractComposition, Protocol[T_co]):
    """Base composition class for types emulating containers."""
    __slots__ = ()

    def _format_value(self, value: Any) -> Any:
        """Format hook for values. Called during operations that would
        add or replace a value.

        This is a no-op unless overridden.
        """
        return value

    def __contains__(self, __value: Any) -> bool:
        return __value in self._object_value_

    def __iter__(self) -> Iterator[T_co]:
        return iter(self._object_value_)

    def __len__(self) -> int:
        return len(self._object_value_)

    def __bool__(self) -> bool:
        return bool(self._object_value_)


class IndexItemGet(ComposedCollection[T], Protocol[T]):
    __slots__ = ()

    @overload
    def __getitem__(self, __index: SupportsIndex, /) -> T: ...
    @overload
    def __getitem__(self, __slice: slice, /) -> list[T]: ...
    def __getitem__(self, __index: Any, /) -> Any:
        try:
            return self._object_value_[__index]
        except IndexError:
            raise IndexError(__index) from None

    def __reversed__(self) -> Iterator[T]:
        yield from reversed(self._object_value_)

    def index(self, __value: Any, __start: int = 0, __stop: int = sys.maxsize, /) -> int:
        return self._object_value_.index(__value, __start, __stop)

    def count(self, __value: Any, /) -> int:
        return self._object_value_.count(__value)


class IndexItemSet(ComposedCollection[T], Protocol[T]):
    """Replaces items in place; never changes the length."""
    __slots__ = ()

    def __setitem__(self, __index: SupportsIndex, __value: Any, /) -> None:
        try:
            self._object_value_[operator.index(__index)] = self._format_value(__value)
        except IndexError:
            raise IndexError(__index) from None

    def reverse(self) -> None:
        self._object_value_.reverse()


class IndexItemGrow(ComposedCollection[T], Protocol[T]):
    __slots__ = ()

    def append(self, __value: Any, /) -> None:
        self._object_value_.append(self._format_value(__value))

    def extend(self, __iterable: Iterable[Any], /) -> None:
        fmt_val = self._format_value
        self._object_value_.extend(fmt_val(v) for v in __iterable)

    def insert(self, __index: SupportsIndex, __value: Any, /) -> None:
        self._object_value_.insert(__index, self._format_value(__value))

    def __iadd__(self, __iterable: Iterable[Any], /) -> Self:
        self.extend(__iterable)
        return self


class IndexItemDel(ComposedCollection[T], Protocol[T]):
    __slots__ = ()

    def __delitem__(self, __index: SupportsIndex | slice, /) -> None:
        try:
            del self._object_value_[__index]
        except IndexError:
            raise IndexError(__index) from None

    def pop(self, __index: SupportsIndex = -1, /) -> T:
        return self._object_value_.pop(__index)

    def remove(self, __value: Any, /) -> None:
        self._object_value_.remove(__value)

    def clear(self) -> None:
        self._object_value_.clear()








# [ Measured Containers ]

_LOCK = threading.Lock()
_SPECIALIZATIONS: dict[tuple[type, type, int | None], type] = {}


def _specialize(base: type, element_type: type, length: int | None = None) -> type:
    key = (base, element_type, length)
    with _LOCK:
        try:
            return _SPECIALIZATIONS[key]
        except KeyError:
            pass

        if length is None:
            name = f'{base.__name__}[{element_type.__qualname__}]'
        else:
            name = f'{base.__name__}[{element_type.__qualname__}, {length}]'

        namespace = {
            '__slots__'   : (),
            '__module__'  : base.__module__,
            '__qualname__': name,
            'ELEMENT_TYPE': element_type,
        }
        if length is not None:
            namespace['LENGTH'] = length
            namespace['INLINE_SIZE'] = length * sizeof(element_type)

        tp = _SPECIALIZATIONS[key] = type(base)(name, (base,), namespace)

    logger.debug("specialized %s (inline_size=%d)", name, sizeof(tp))
    return tp


def _check_element_type(base: type, element_type: Any) -> type:
    if getattr(base, 'ELEMENT_TYPE', None) is not None:
        raise TypeError(f"{base.__name__} is already specialized")
    if not isinstance(element_type, type):
        raise TypeError(f"{base.__name__} element type must be a class, got {element_type!r}")
    if not implements_getsize(element_type):
        raise TypeError(f"cannot measure object of type {element_type.__name__!r}")
    if issubclass(element_type, Composite) and element_type.ELEMENT_TYPE is None:
        raise TypeError(f"{element_type.__name__} must be specialized before use as an element type")
    # raises `TypeError` for classes without a fixed inline size
    sizeof(element_type)
    uses_dynamic_memory(element_type)
    return element_type


class Composite(GetSize, IndexItemGet[T]):
    """Base class for measured containers holding values of a single
    element type.

    Containers are used through their specializations, created by
    subscripting the container class with an element type (for example,
    `Vec[U32]`). Specializations are cached, so subscripting twice
    returns the same class.

    A container owns its items. Putting the same item into two
    containers makes both of them count it.
    """
    __slots__ = ('_object_value_',)

    ELEMENT_TYPE: ClassVar[type | None] = None

    _object_value_: list[T]

    def __init__(self, items: Iterable[Any] = (), /):
        if type(self).ELEMENT_TYPE is None:
            raise TypeError(
                f"{type(self).__name__} must be specialized before use, e.g. {type(self).__name__}[U32]"
            )
        fmt_val = self._format_value
        self._object_value_ = [fmt_val(v) for v in items]

    def _format_value(self, value: Any) -> T:
        element_type = self.ELEMENT_TYPE
        if isinstance(value, element_type):  # type: ignore
            return value
        return element_type(value)  # type: ignore

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Composite):
            return type(self) is type(other) and self._object_value_ == other._object_value_
        if isinstance(other, (list, tuple)):
            return self._object_value_ == list(other)
        return NotImplemented

    __hash__ = None  # type: ignore

    @reprlib.recursive_repr()
    def __repr__(self) -> str:
        return f'{type(self).__name__}({self._object_value_!r})'


class Array(Composite[T], IndexItemSet[T]):
    """Fixed-length array stored inline. Subscript with the element
    type and the length, e.g. `Array[U32, 3]`.

    Items are part of the array's own storage, so the inline footprint
    is `LENGTH * sizeof(ELEMENT_TYPE)` and the dynamic footprint only
    adds what the items own on the heap.

    Without *items*, every slot is filled with `ELEMENT_TYPE()`.
    """
    __slots__ = ()

    LENGTH: ClassVar[int]

    def __class_getitem__(cls, params: tuple[type, SupportsIndex]) -> type[Self]:
        if isinstance(params, TypeVar):
            return super().__class_getitem__(params)  # type: ignore
        if not isinstance(params, tuple) or len(params) != 2:
            raise TypeError(f"{cls.__name__} requires an element type and a length, e.g. {cls.__name__}[U32, 3]")
        element_type, length = params
        element_type = _check_element_type(cls, element_type)
        length = operator.index(length)
        if length < 0:
            raise ValueError(f"{cls.__name__} length must be non-negative, got {length}")
        return _specialize(cls, element_type, length)

    @classproperty
    def USES_DYNAMIC_MEMORY(cls) -> bool:  # pyright: ignore[reportIncompatibleVariableOverride]
        element_type = cls.ELEMENT_TYPE
        if element_type is None:
            raise TypeError(f"{cls.__name__} must be specialized before use, e.g. {cls.__name__}[U32, 3]")
        return uses_dynamic_memory(element_type)

    def __init__(self, items: Iterable[Any] | None = None, /):
        if items is None and type(self).ELEMENT_TYPE is not None:
            items = [self.ELEMENT_TYPE() for _ in range(self.LENGTH)]
        super().__init__(() if items is None else items)
        if len(self._object_value_) != self.LENGTH:
            raise ValueError(
                f"{type(self).__name__} requires exactly {self.LENGTH} items, got {len(self._object_value_)}"
            )

    def __delitem__(self, __index: Any, /) -> None:
        raise TypeError(f"{type(self).__name__} length is fixed")

    def dynamic_footprint(self) -> int:
        if not self.USES_DYNAMIC_MEMORY:
            return 0
        return sum(dynamic_footprint(item) for item in self._object_value_)


class HeapSequence(Composite[T]):
    """Base class for containers keeping their items in an owned heap
    buffer. Only the handle is stored inline.

    The buffer is measured from the current length; Python lists do not
    expose their capacity.
    """
    __slots__ = ()

    USES_DYNAMIC_MEMORY = True

    def __class_getitem__(cls, element_type: type) -> type[Self]:
        if isinstance(element_type, TypeVar):
            return super().__class_getitem__(element_type)  # type: ignore
        return _specialize(cls, _check_element_type(cls, element_type))

    def dynamic_footprint(self) -> int:
        element_type = self.ELEMENT_TYPE
        if not uses_dynamic_memory(element_type):
            return sizeof(element_type) * len(self._object_value_)
        return sum(total_footprint(item) for item in self._object_value_)


class Vec(HeapSequence[T], IndexItemDel[T], IndexItemGrow[T], IndexItemSet[T]):
    """Growable heap-backed sequence. Subscript with the element type,
    e.g. `Vec[U32]`."""
    __slots__ = ()

    INLINE_SIZE = VEC_HANDLE_SIZE

    def into_boxed_slice(self) -> 'BoxedSlice[T]':
        """Move the items into a new `BoxedSlice` of the same element
        type. The vector is left empty."""
        boxed = BoxedSlice[self.ELEMENT_TYPE](self._object_value_)  # type: ignore
        self._object_value_ = []
        return boxed


class BoxedSlice(HeapSequence[T], IndexItemSet[T]):
    """Fixed-length heap-backed sequence. Subscript with the element
    type, e.g. `BoxedSlice[U32]`."""
    __slots__ = ()

    INLINE_SIZE = BOXED_SLICE_HANDLE_SIZE

    def __delitem__(self, __index: Any, /) -> None:
        raise TypeError(f"{type(self).__name__} length is fixed")

    def into_vec(self) -> Vec[T]:
        """Move the items into a new `Vec` of the same element type.
        The slice is left empty."""
        vec = Vec[self.ELEMENT_TYPE](self._object_value_)  # type: ignore
        self._object_value_ = []
        return vec
