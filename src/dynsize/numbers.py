from numbers import *
import sys
import math
import struct
import operator
from . import _shared
from ._shared import AbstractComposition
from .sys import GetSize, POINTER_SIZE
from .typing import Any, Callable, ClassVar, SupportsIndex, Self, TypeVar


_P = TypeVar('_P', bound='Primitive')




# [ Operator Forwarding ]

# dunder name -> (operator, is the reflected form)
_BINARY_OPERATORS: dict[str, tuple[Callable[[Any, Any], Any], bool]] = {}
for _name, _fn in (
    ('add', operator.add),
    ('sub', operator.sub),
    ('mul', operator.mul),
    ('truediv', operator.truediv),
    ('floordiv', operator.floordiv),
    ('mod', operator.mod),
    ('pow', operator.pow),
    ('lshift', operator.lshift),
    ('rshift', operator.rshift),
    ('and', operator.and_),
    ('xor', operator.xor),
    ('or', operator.or_),
    ('divmod', divmod),
):
    _BINARY_OPERATORS[f'__{_name}__']  = (_fn, False)
    _BINARY_OPERATORS[f'__r{_name}__'] = (_fn, True)
for _name in ('lt', 'le', 'gt', 'ge'):
    _BINARY_OPERATORS[f'__{_name}__'] = (getattr(operator, _name), False)
del _name, _fn

_UNARY_OPERATORS: dict[str, Callable[[Any], Any]] = {
    '__neg__'   : operator.neg,
    '__pos__'   : operator.pos,
    '__abs__'   : abs,
    '__invert__': operator.invert,
    '__int__'   : int,
    '__index__' : operator.index,
    '__float__' : float,
    '__trunc__' : int,
    '__floor__' : math.floor,
    '__ceil__'  : math.ceil,
    '__complex__': complex,
}

_ARITHMETIC = (
    '__add__', '__radd__', '__sub__', '__rsub__', '__mul__', '__rmul__',
    '__truediv__', '__rtruediv__', '__floordiv__', '__rfloordiv__',
    '__mod__', '__rmod__', '__pow__', '__rpow__', '__divmod__', '__rdivmod__',
    '__neg__', '__pos__', '__abs__',
)
_BITWISE = (
    '__lshift__', '__rlshift__', '__rshift__', '__rrshift__',
    '__and__', '__rand__', '__xor__', '__rxor__', '__or__', '__ror__',
    '__invert__',
)
_ORDERING = ('__lt__', '__le__', '__gt__', '__ge__')
_CONVERSIONS = ('__int__', '__float__', '__complex__', '__trunc__', '__floor__', '__ceil__')


def _forward_operators(*names: str) -> Callable[[type[_P]], type[_P]]:
    """Generate the named dunder methods on the decorated class. Each
    forwards to the same operator applied to `self._object_value_`,
    unwrapping primitive operands first. Results are plain Python
    objects."""

    def add_dunders(tp: type[_P]) -> type[_P]:
        for name in names:
            if name in _UNARY_OPERATORS:
                fn = _shared.create_function(
                    name,
                    ('self', '/'),
                    ('return _op(self._object_value_)',),
                    Any,
                    __name__,
                    globals=globals(),
                    locals={'_op': _UNARY_OPERATORS[name]},
                )
            else:
                op, reflected = _BINARY_OPERATORS[name]
                fn = _shared.create_function(
                    name,
                    ('self', 'other', '/'),
                    (
                        'if isinstance(other, Primitive):',
                        '    other = other._object_value_',
                        'elif not isinstance(other, Number):',
                        '    return NotImplemented',
                        (
                            'return _op(other, self._object_value_)'
                            if reflected else
                            'return _op(self._object_value_, other)'
                        ),
                    ),
                    Any,
                    __name__,
                    globals=globals(),
                    locals={'_op': op},
                )
            fn.__qualname__ = f'{tp.__qualname__}.{name}'
            type.__setattr__(tp, name, fn)
        return tp

    return add_dunders




# [ Primitives ]

class Primitive(GetSize, AbstractComposition):
    """Base class for fixed-width values. Instances wrap a plain Python
    value, occupy exactly `INLINE_SIZE` bytes and never own heap memory.

    Primitives compare and hash like the value they wrap. The wrapped
    value is set once, by the constructor.
    """
    __slots__ = ('_object_value_',)

    INLINE_SIZE: ClassVar[int]

    @property
    def value(self) -> Any:
        return self._object_value_

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self._object_value_!r})'

    def _init_value(self, value: Any) -> None:
        object.__setattr__(self, '_object_value_', value)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} objects are immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} objects are immutable")

    def __str__(self) -> str:
        return str(self._object_value_)

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Primitive):
            other = other._object_value_
        return self._object_value_ == other

    def __hash__(self) -> int:
        return hash(self._object_value_)

    def __bool__(self) -> bool:
        return bool(self._object_value_)

    def __copy__(self) -> Self:
        return self

    def __deepcopy__(self, memo: Any) -> Self:
        return self

    def __bytes__(self) -> bytes:
        """Return the in-memory representation of the value (native
        byte order). Its length is always `INLINE_SIZE`."""
        raise NotImplementedError

    @classmethod
    def _decode(cls, data: bytes) -> Any:
        raise NotImplementedError

    @classmethod
    def from_bytes(cls, data: bytes | bytearray | memoryview, /) -> Self:
        """Create a value from its in-memory representation."""
        data = bytes(data)
        if len(data) != cls.INLINE_SIZE:
            raise ValueError(
                f"{cls.__name__} requires exactly {cls.INLINE_SIZE} bytes, got {len(data)}"
            )
        return cls(cls._decode(data))



class Scalar(Primitive):
    """Base class for numeric primitives. Fills in the parts of the
    `numbers.Real` interface that are not plain operator forwards."""
    __slots__ = ()

    def __round__(self, ndigits: int | None = None):
        return round(self._object_value_, ndigits)

    @property
    def real(self):
        return self._object_value_

    @property
    def imag(self):
        return 0

    def conjugate(self):
        return self._object_value_


@_forward_operators(*_ARITHMETIC, *_BITWISE, *_ORDERING, *_CONVERSIONS, '__index__')
class Integer(Scalar):
    """Fixed-width two's complement integer.

    Subclasses declare their width with class keywords, e.g.
    `class U24(Integer, bits=24, signed=False): ...`.
    """
    __slots__ = ()

    BITS  : ClassVar[int]
    SIGNED: ClassVar[bool]
    MIN   : ClassVar[int]
    MAX   : ClassVar[int]

    _object_value_: int

    def __init_subclass__(cls, *, bits: int | None = None, signed: bool = False, **kwargs: Any):
        super().__init_subclass__(**kwargs)
        if bits is None:
            return
        if bits <= 0 or bits % 8:
            raise ValueError(f"bit width must be a positive multiple of 8, got {bits}")
        cls.BITS        = bits
        cls.SIGNED      = signed
        cls.INLINE_SIZE = bits // 8
        if signed:
            cls.MIN = -(1 << (bits - 1))
            cls.MAX = (1 << (bits - 1)) - 1
        else:
            cls.MIN = 0
            cls.MAX = (1 << bits) - 1

    def __init__(self, value: SupportsIndex = 0, /):
        value = operator.index(value)
        if not self.MIN <= value <= self.MAX:
            raise OverflowError(
                f"{value} is out of range for {type(self).__name__} [{self.MIN}, {self.MAX}]"
            )
        self._init_value(value)

    def __bytes__(self) -> bytes:
        return self._object_value_.to_bytes(self.INLINE_SIZE, sys.byteorder, signed=self.SIGNED)

    @classmethod
    def _decode(cls, data: bytes) -> int:
        return int.from_bytes(data, sys.byteorder, signed=cls.SIGNED)

    @property
    def numerator(self) -> int:
        return self._object_value_

    @property
    def denominator(self) -> int:
        return 1

Integral.register(Integer)


class U8(Integer, bits=8):
    __slots__ = ()

class U16(Integer, bits=16):
    __slots__ = ()

class U32(Integer, bits=32):
    __slots__ = ()

class U64(Integer, bits=64):
    __slots__ = ()

class U128(Integer, bits=128):
    __slots__ = ()

class USize(Integer, bits=POINTER_SIZE * 8):
    """Unsigned integer as wide as a pointer."""
    __slots__ = ()

class I8(Integer, bits=8, signed=True):
    __slots__ = ()

class I16(Integer, bits=16, signed=True):
    __slots__ = ()

class I32(Integer, bits=32, signed=True):
    __slots__ = ()

class I64(Integer, bits=64, signed=True):
    __slots__ = ()

class I128(Integer, bits=128, signed=True):
    __slots__ = ()

class ISize(Integer, bits=POINTER_SIZE * 8, signed=True):
    """Signed integer as wide as a pointer."""
    __slots__ = ()


@_forward_operators(*_ARITHMETIC, *_ORDERING, *_CONVERSIONS)
class Float(Scalar):
    """IEEE-754 binary floating point number. The wrapped value is
    rounded to the precision of the format on creation.
    """
    __slots__ = ()

    FORMAT: ClassVar[str]

    _object_value_: float

    def __init_subclass__(cls, *, format: str | None = None, **kwargs: Any):
        super().__init_subclass__(**kwargs)
        if format is None:
            return
        cls.FORMAT      = '=' + format
        cls.INLINE_SIZE = struct.calcsize(cls.FORMAT)

    def __init__(self, value: Real | SupportsIndex = 0.0, /):
        if not isinstance(value, (Real, Primitive)):
            raise TypeError(f"{type(self).__name__} requires a real number, got {type(value).__name__!r}")
        # `struct.pack` raises `OverflowError` for finite values too large for the format
        self._init_value(self._decode(struct.pack(self.FORMAT, float(value))))

    def __bytes__(self) -> bytes:
        return struct.pack(self.FORMAT, self._object_value_)

    @classmethod
    def _decode(cls, data: bytes) -> float:
        return struct.unpack(cls.FORMAT, data)[0]

    def is_integer(self) -> bool:
        return self._object_value_.is_integer()

Real.register(Float)


class F32(Float, format='f'):
    __slots__ = ()

class F64(Float, format='d'):
    __slots__ = ()


@_forward_operators(*_ORDERING)
class Char(Primitive):
    """A single Unicode scalar value, stored as 4 bytes."""
    __slots__ = ()

    INLINE_SIZE = 4

    _object_value_: str

    def __init__(self, value: str = '\0', /):
        if not isinstance(value, str):
            raise TypeError(f"Char requires a str, got {type(value).__name__!r}")
        if len(value) != 1:
            raise ValueError(f"Char requires a single character, got {len(value)}")
        if 0xD800 <= ord(value) <= 0xDFFF:
            raise ValueError(f"surrogate code point U+{ord(value):04X} is not a Unicode scalar value")
        self._init_value(value)

    def __int__(self) -> int:
        return ord(self._object_value_)

    def __bytes__(self) -> bytes:
        return ord(self._object_value_).to_bytes(self.INLINE_SIZE, sys.byteorder)

    @classmethod
    def _decode(cls, data: bytes) -> str:
        try:
            return chr(int.from_bytes(data, sys.byteorder))
        except (ValueError, OverflowError):
            raise ValueError(f"{data!r} is not a valid code point") from None


class Unit(Primitive):
    """The zero-sized value."""
    __slots__ = ()

    INLINE_SIZE = 0

    _object_value_: None

    def __init__(self, value: None = None, /):
        if value is not None:
            raise TypeError(f"Unit does not hold a value, got {type(value).__name__!r}")
        self._init_value(None)

    def __repr__(self) -> str:
        return 'Unit()'

    def __bytes__(self) -> bytes:
        return b''

    @classmethod
    def _decode(cls, data: bytes) -> None:
        return None
