from __future__ import annotations
from dataclasses import dataclass
from enum import IntEnum
from functools import reduce
from typing import Any, List, Optional, Tuple, Union

from pyhcl import Bool, U
from helper.common import cls_or_insmethod, foldLeft, isLiteral
from util.common import isPow2, log2Ceil


class RegionType(IntEnum):
    CACHED      = 1 # an intermediate agent may have cached a copy of the region for you
    TRACKED     = 2 # the region may have been cached by another master, but coherence is being provided
    UNCACHED    = 3 # the region has not been cached yet, but should be cached when possible
    UNCACHEABLE = 4 # the region must never be cached

    @classmethod
    def cases(cls):
        return list(cls)


# A non-empty half-open range; [start, end)
@dataclass(frozen=True)
class IdRange:
    start: int
    end:   int

    def __post_init__(self):
        assert self.start >= 0, f"Ids cannot be negative, but got: {self.start}."
        assert self.end >= 0, f"Ids cannot be negative, but got: {self.end}."
        assert self.start < self.end, f"Id ranges cannot be empty, got: [{self.start}, {self.end})"

    # This is a strict partial ordering
    def __lt__(self, x: IdRange) -> bool:
        return self.end <= x.start

    def __gt__(self, x: IdRange) -> bool:
        return x < self

    @cls_or_insmethod
    def overlaps(self, x: Union[IdRange, List[IdRange]]):
        if not isinstance(self, type):
            return self.start < x.end and x.start < self.end
        # a list; returns the first overlapping pair, or None
        s = sorted(x, key=lambda r: (r.start, r.end))
        for a, b in zip(s[:-1], s[1:]):
            if a.overlaps(b):
                return (a, b)
        return None

    def contains(self, x: Union[int, IdRange, U]):
        if isinstance(x, IdRange):
            return self.start <= x.start and x.end <= self.end
        if isinstance(x, int):
            return self.start <= x and x < self.end
        if self.size == 1: # simple comparison
            return x == U(self.start)
        return (U(self.start) <= x) & (x < U(self.end))
    # contains => overlaps (because empty is forbidden)

    def shift(self, x: int) -> IdRange:
        return IdRange(self.start + x, self.end + x)

    @property
    def size(self):
        return self.end - self.start

    @property
    def range(self):
        return range(self.start, self.end)

    def __str__(self):
        return f"[{self.start}, {self.end})"


# An potentially empty inclusive range of 2-powers [min, max] (in bytes)
@dataclass(frozen=True)
class TransferSizes:
    min: int = 0
    max: Optional[int] = None

    def __post_init__(self):
        if self.max is None:
            object.__setattr__(self, "max", self.min)
        assert self.min <= self.max, f"Min transfer {self.min} > max transfer {self.max}"
        assert self.min >= 0 and self.max >= 0, f"TransferSizes must be positive, got: ({self.min}, {self.max})"
        assert self.max == 0 or isPow2(self.max), f"TransferSizes must be a power of 2, got: {self.max}"
        assert self.min == 0 or isPow2(self.min), f"TransferSizes must be a power of 2, got: {self.min}"
        assert self.max == 0 or self.min != 0, f"TransferSize 0 is forbidden unless (0,0), got: ({self.min}, {self.max})"

    @property
    def none(self) -> bool:
        return self.min == 0

    @property
    def supported(self) -> bool:
        return not self.none

    def __bool__(self):
        raise TypeError("TransferSizes has no truth value; use .none or .supported")

    def contains(self, x: Union[int, TransferSizes]) -> bool:
        if isinstance(x, TransferSizes):
            return x.none or (self.min <= x.min and x.max <= self.max)
        return isPow2(x) and self.min <= x and x <= self.max

    def containsLg(self, x: Union[int, U]):
        if isinstance(x, int):
            return self.contains(1 << x)
        if self.none:
            return Bool(False)
        if self.min == self.max:
            return x == U(log2Ceil(self.min))
        return (U(log2Ceil(self.min)) <= x) & (x <= U(log2Ceil(self.max)))

    @cls_or_insmethod
    def intersect(self, x: Union[TransferSizes, List[TransferSizes]]) -> TransferSizes:
        if isinstance(self, type):
            return reduce(lambda a, b: a.intersect(b), x)
        if x.max < self.min or self.max < x.min:
            return TransferSizes()
        return TransferSizes(max(self.min, x.min), min(self.max, x.max))

    # Not a union, because the result may contain sizes contained by neither term
    @cls_or_insmethod
    def mincover(self, x: Union[TransferSizes, List[TransferSizes]]) -> TransferSizes:
        if isinstance(self, type):
            return foldLeft(lambda a, b: a.mincover(b), x, TransferSizes())
        if self.none:
            return x
        if x.none:
            return self
        return TransferSizes(min(self.min, x.min), max(self.max, x.max))

    def __str__(self):
        return f"TransferSizes[{self.min}, {self.max}]"


# AddressSets specify the mask of bits consumed by the manager
# e.g: base=0x200, mask=0xff describes a device managing 0x200-0x2ff
# e.g: base=0x1000, mask=0xf0f decribes a device managing 0x1000-0x100f, 0x1100-0x110f, ...
# A set without a base is a placeholder that has not been placed yet
@dataclass(frozen=True)
class AddressSet:
    mask: int
    base: Optional[int] = None

    def __post_init__(self):
        if self.base is not None:
            # Forbid misaligned base address (and empty sets)
            assert (self.base & self.mask) == 0, f"Mis-aligned AddressSets are forbidden, got: {self}"
            assert self.base >= 0, f"AddressSet negative base is ambiguous: {self.base}"
        # We do allow negative mask (=> ignore all high bits)

    @property
    def assigned(self) -> bool:
        return self.base is not None

    def assign(self, base: int) -> AddressSet:
        return AddressSet(self.mask, base)

    def contains(self, x: Union[int, AddressSet, U]):
        if isinstance(x, AddressSet):
            if not (self.assigned and x.assigned):
                return False
            # contains iff bitwise: x.mask => mask && contains(x.base)
            return ((x.mask | (self.base ^ x.base)) & ~self.mask) == 0
        if isinstance(x, int):
            return self.assigned and ((x ^ self.base) & ~self.mask) == 0
        if not self.assigned:
            return Bool(False)
        if self.finite:
            return (x | U(self.mask)) == U(self.base | self.mask)
        return (x & U(~self.mask)) == U(self.base & ~self.mask)

    # overlap iff bitwise: both care (~mask0 & ~mask1) => both equal (base0=base1)
    # if base = None, it will be assigned later and thus does not overlap anything
    def overlaps(self, x: AddressSet) -> bool:
        if not (self.assigned and x.assigned):
            return False
        return (~(self.mask | x.mask) & (self.base ^ x.base)) == 0

    # 1 less than the number of bytes to which the manager should be aligned
    @property
    def alignment1(self) -> int:
        return ((self.mask + 1) & ~self.mask) - 1

    @property
    def finite(self) -> bool:
        return self.mask >= 0

    @property
    def max(self) -> int:
        assert self.assigned, f"Max cannot be calculated on an unassigned {self}"
        assert self.finite, "Max cannot be calculated on infinite mask"
        return self.base | self.mask

    @classmethod
    def everything(cls) -> AddressSet:
        return AddressSet(-1, 0)

    # We always want to see things in hex
    def __str__(self):
        mask = "0x%x" % self.mask if self.finite else "~0x%x" % ~self.mask
        if not self.assigned:
            return "AddressSet(%s, unassigned)" % mask
        return "AddressSet(0x%x, %s)" % (self.base, mask)


if __name__ == "__main__":

    """
    TransferSizes
    """

    t0 = TransferSizes(1)
    t = TransferSizes(4, 8)
    print(t.none, t.contains(4), t.containsLg(3))
    print(t.intersect(t0), t.mincover(t0))
    print(TransferSizes.intersect([t, TransferSizes(8, 64)]))

    """
    AddressSet
    """
    a = AddressSet.everything()
    b = AddressSet(0xff, 0x200)
    print(a, b, b.alignment1, b.max, a.contains(10), b.overlaps(a))
    print(IdRange.overlaps([IdRange(0, 4), IdRange(8, 9), IdRange(3, 5)]))
