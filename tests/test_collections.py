from concurrent.futures import ThreadPoolExecutor

import pytest

from dynsize.collections import Array, BoxedSlice, Composite, Vec
from dynsize.numbers import U8, U16, U32, Char, F64, Unit
from dynsize.sys import (
    GetSize,
    POINTER_SIZE,
    VEC_HANDLE_SIZE,
    BOXED_SLICE_HANDLE_SIZE,
    dynamic_footprint,
    sizeof,
    total_footprint,
    uses_dynamic_memory,
)


class Name(GetSize):
    """Owns a heap buffer holding its encoded text."""
    __slots__ = ('text',)

    INLINE_SIZE = 3 * POINTER_SIZE
    USES_DYNAMIC_MEMORY = True

    def __init__(self, text=''):
        self.text = text.encode()

    def dynamic_footprint(self):
        return len(self.text)




# [ Scenarios ]

def test_array_of_integers():
    assert Array[U32, 3]([1, 2, 3]).total_footprint() == 12


def test_array_of_arrays():
    assert Array[Array[U32, 2], 2]([[1, 2], [3, 4]]).total_footprint() == 16


def test_array_of_vectors_counts_only_their_buffers():
    v1 = Vec[U32]([1, 2])
    v2 = Vec[U32]([3, 4])
    arr = Array[Vec[U32], 2]([v1, v2])
    assert arr.dynamic_footprint() == v1.dynamic_footprint() + v2.dynamic_footprint() == 16
    assert arr.total_footprint() == 2 * VEC_HANDLE_SIZE + 16


def test_vector_of_integers():
    assert Vec[U32]([1, 2, 3]).dynamic_footprint() == 12


def test_vector_of_vectors():
    vec = Vec[Vec[U32]]([[1, 2], [1, 2]])
    assert vec.dynamic_footprint() == 2 * (VEC_HANDLE_SIZE + 8)
    assert vec.dynamic_footprint() == sum(total_footprint(v) for v in vec)


def test_boxed_slice_of_integers():
    boxed = Vec[U32]([1, 2, 3]).into_boxed_slice()
    assert boxed.dynamic_footprint() == 12
    assert boxed.total_footprint() == 12 + BOXED_SLICE_HANDLE_SIZE




# [ Arrays ]

def test_array_flag_follows_element():
    assert Array[U32, 3].USES_DYNAMIC_MEMORY is False
    assert Array[Array[U8, 4], 2].USES_DYNAMIC_MEMORY is False
    assert Array[Vec[U32], 2].USES_DYNAMIC_MEMORY is True
    assert uses_dynamic_memory(Array[Array[Vec[U8], 1], 1])
    assert Array[Name, 1]().USES_DYNAMIC_MEMORY is True


def test_array_inline_size():
    assert sizeof(Array[U16, 5]) == 10
    assert sizeof(Array[Vec[U8], 2]) == 2 * VEC_HANDLE_SIZE
    assert sizeof(Array[F64, 0]) == 0
    assert Array[Unit, 8]().total_footprint() == 0


def test_array_of_non_owning_elements_has_no_dynamic_part():
    arr = Array[Array[U32, 2], 3]()
    assert arr.dynamic_footprint() == 0
    assert arr.total_footprint() == 3 * 2 * 4


def test_array_adds_element_dynamic_parts():
    arr = Array[Name, 2](['ab', 'cde'])
    assert arr.dynamic_footprint() == 5
    assert arr.total_footprint() == 2 * Name.INLINE_SIZE + 5


def test_array_skips_elements_without_dynamic_memory():
    calls = []

    class Spy(GetSize):
        __slots__ = ()
        INLINE_SIZE = 4

        def dynamic_footprint(self):
            calls.append(self)
            return 0

    assert Array[Spy, 3]().dynamic_footprint() == 0
    assert Vec[Spy]([Spy(), Spy()]).dynamic_footprint() == 8
    assert calls == []


def test_array_default_items_are_distinct():
    arr = Array[Vec[U8], 2]()
    assert arr[0] is not arr[1]
    arr[0].append(1)
    assert arr == [[1], []]
    assert arr.dynamic_footprint() == 1


def test_array_length_is_fixed():
    with pytest.raises(ValueError):
        Array[U32, 3]([1, 2])
    with pytest.raises(ValueError):
        Array[U32, 3]([1, 2, 3, 4])
    arr = Array[U32, 3]([1, 2, 3])
    assert not hasattr(arr, 'append')
    assert not hasattr(arr, 'pop')
    with pytest.raises(TypeError, match='length is fixed'):
        del arr[0]
    assert len(arr) == 3


def test_array_item_assignment():
    arr = Array[U32, 3]([1, 2, 3])
    arr[0] = 10
    assert type(arr[0]) is U32
    assert list(arr) == [10, 2, 3]
    assert list(reversed(arr)) == [3, 2, 10]
    assert arr.index(2) == 1
    assert arr.count(3) == 1
    assert 10 in arr
    with pytest.raises(IndexError):
        arr[3] = 1
    with pytest.raises(IndexError):
        arr[3]
    with pytest.raises(OverflowError):
        arr[1] = 2**40


def test_array_specialization_errors():
    with pytest.raises(TypeError):
        Array[U32]  # type: ignore
    with pytest.raises(ValueError):
        Array[U32, -1]
    with pytest.raises(TypeError):
        Array[U32, 1.5]  # type: ignore
    with pytest.raises(TypeError):
        Array[int, 2]
    with pytest.raises(TypeError):
        Array[U32, 2][U8, 2]  # type: ignore
    with pytest.raises(TypeError):
        Array()
    with pytest.raises(TypeError):
        Array.USES_DYNAMIC_MEMORY




# [ Heap Sequences ]

def test_heap_sequences_always_use_dynamic_memory():
    assert Vec[U8].USES_DYNAMIC_MEMORY is True
    assert BoxedSlice[U8].USES_DYNAMIC_MEMORY is True
    assert uses_dynamic_memory(Vec[U8]())


def test_heap_sequence_handles():
    assert sizeof(Vec[U32]) == VEC_HANDLE_SIZE
    assert sizeof(BoxedSlice[Vec[U32]]) == BOXED_SLICE_HANDLE_SIZE
    empty = Vec[U32]()
    assert empty.dynamic_footprint() == 0
    assert empty.total_footprint() == VEC_HANDLE_SIZE


def test_vector_of_arrays_uses_inline_size():
    vec = Vec[Array[U32, 2]]([[1, 2], [3, 4]])
    assert vec.dynamic_footprint() == 16


def test_vector_of_heap_owning_elements():
    vec = Vec[Name](['ab', 'cde'])
    assert vec.dynamic_footprint() == (Name.INLINE_SIZE + 2) + (Name.INLINE_SIZE + 3)


def test_vector_of_registered_builtins():
    assert Vec[float]([1, 2.5]).dynamic_footprint() == 16
    assert Vec[bool]([True, False, True]).dynamic_footprint() == 3
    assert Vec[float]([1])[0] == 1.0


def test_nested_vectors_at_depth():
    inner = Vec[U8]([1, 2, 3])
    middle = Vec[Vec[U8]]([inner])
    outer = Vec[Vec[Vec[U8]]]([middle])
    assert inner.total_footprint() == VEC_HANDLE_SIZE + 3
    assert middle.total_footprint() == VEC_HANDLE_SIZE + VEC_HANDLE_SIZE + 3
    assert outer.dynamic_footprint() == middle.total_footprint()
    assert outer.total_footprint() == 3 * VEC_HANDLE_SIZE + 3


def test_vector_mutation_is_remeasured():
    vec = Vec[U32]([1])
    vec.append(2)
    vec.extend([3, 4])
    assert vec.dynamic_footprint() == 16
    assert vec.pop() == 4
    assert vec.dynamic_footprint() == 12
    del vec[0]
    assert vec == [2, 3]
    vec.insert(0, 9)
    vec.remove(3)
    assert vec == [9, 2]
    vec += [5]
    assert vec.dynamic_footprint() == 12
    vec.reverse()
    assert vec == [5, 2, 9]
    vec.clear()
    assert vec.dynamic_footprint() == 0
    assert not vec


def test_vector_items_are_converted():
    vec = Vec[Char](['a'])
    vec.append('b')
    assert all(type(c) is Char for c in vec)
    with pytest.raises(OverflowError):
        Vec[U8]([256])
    with pytest.raises(TypeError):
        Vec[U8]().append('x')


def test_inner_mutation_is_seen_by_outer():
    vec = Vec[Vec[U16]]([[1], [2]])
    before = vec.dynamic_footprint()
    vec[0].extend([3, 4])
    assert vec.dynamic_footprint() == before + 4


def test_boxed_slice():
    boxed = BoxedSlice[U8]([1, 2, 3])
    boxed[0] = 7
    assert boxed == [7, 2, 3]
    assert not hasattr(boxed, 'append')
    with pytest.raises(TypeError, match='length is fixed'):
        del boxed[0]
    assert len(boxed) == 3
    assert boxed.total_footprint() == BOXED_SLICE_HANDLE_SIZE + 3


def test_boxed_slice_conversions_move_items():
    vec = Vec[U32]([1, 2, 3])
    boxed = vec.into_boxed_slice()
    assert type(boxed) is BoxedSlice[U32]
    assert len(vec) == 0
    back = boxed.into_vec()
    assert type(back) is Vec[U32]
    assert back == [1, 2, 3]
    assert len(boxed) == 0


def test_unmeasurable_element_types_are_rejected():
    with pytest.raises(TypeError):
        Vec[GetSize]
    with pytest.raises(TypeError):
        Vec[Array]
    with pytest.raises(TypeError):
        Array[Vec, 1]
    with pytest.raises(TypeError):
        BoxedSlice[Composite]


def test_heap_sequence_specialization_errors():
    with pytest.raises(TypeError):
        Vec[int]
    with pytest.raises(TypeError):
        Vec[3]  # type: ignore
    with pytest.raises(TypeError):
        Vec[U8][U8]  # type: ignore
    with pytest.raises(TypeError):
        Vec()
    with pytest.raises(TypeError):
        BoxedSlice([1])




# [ Specialization ]

def test_specializations_are_cached():
    assert Vec[U32] is Vec[U32]
    assert Array[U32, 3] is Array[U32, 3]
    assert Vec[U32] is not BoxedSlice[U32]
    assert issubclass(Vec[U32], Vec)
    assert issubclass(Array[U32, 3], Composite)
    assert Vec[U32].ELEMENT_TYPE is U32
    assert Array[U32, 3].LENGTH == 3


def test_concurrent_specialization_returns_one_class():
    with ThreadPoolExecutor(max_workers=8) as pool:
        types = set(pool.map(lambda _: Vec[Array[U16, 7]], range(64)))
    assert len(types) == 1


def test_equality_and_repr():
    assert Vec[U32]([1, 2]) == Vec[U32]([1, 2])
    assert Vec[U32]([1, 2]) != Vec[U16]([1, 2])
    assert Vec[U32]([1, 2]) == (1, 2)
    assert Vec[U32]([1]) != 'x'
    assert repr(Vec[U32]([1])) == 'Vec[U32]([U32(1)])'
    assert repr(Array[U8, 1]()) == 'Array[U8, 1]([U8(0)])'
    with pytest.raises(TypeError):
        hash(Vec[U8]())


def test_free_functions_on_containers():
    vec = Vec[U32]([1, 2])
    assert dynamic_footprint(vec) == 8
    assert total_footprint(vec) == VEC_HANDLE_SIZE + 8
    assert sizeof(vec) == VEC_HANDLE_SIZE


def test_classproperty_flag_is_read_only():
    arr = Array[U8, 1]()
    with pytest.raises(AttributeError):
        arr.USES_DYNAMIC_MEMORY = True  # type: ignore
