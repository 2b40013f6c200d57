from typing_extensions import *
from typing import *




# [ General TypeVars ]

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)







# [ Structural Types ]

@runtime_checkable
class SupportsGetSize(Protocol):
    """Structural type of objects that report their own footprint.

    Nominal participation is done by subclassing `dynsize.sys.GetSize`;
    this protocol only exists for annotations and `isinstance` checks
    against objects built elsewhere.
    """
    __slots__ = ()
    def dynamic_footprint(self) -> int: ...
    def total_footprint(self) -> int: ...







# [ Aliases ]

# Values accepted by the `dynsize.sys` measuring functions.
Measurable = TypeAliasType("Measurable", 'SupportsGetSize | bool | float | None')
