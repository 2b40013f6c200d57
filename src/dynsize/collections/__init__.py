from collections import *  # pyright: ignore[reportAssignmentType]
from ._collections import (
    ComposedCollection,
    IndexItemGet,
    IndexItemSet,
    IndexItemGrow,
    IndexItemDel,
    Composite,
    Array,
    HeapSequence,
    Vec,
    BoxedSlice,
)
