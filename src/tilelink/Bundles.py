from __future__ import annotations
from dataclasses import dataclass
from typing import Any


class TLMessages:
    #                                  A    B    C    D    E
    PutFullData    = 0 #               .    .                   => AccessAck
    PutPartialData = 1 #               .    .                   => AccessAck
    ArithmeticData = 2 #               .    .                   => AccessAckData
    LogicalData    = 3 #               .    .                   => AccessAckData
    Get            = 4 #               .    .                   => AccessAckData
    Hint           = 5 #               .    .                   => AccessAck
    Acquire        = 6 #               .                        => Grant[Data]
    Probe          = 6 #                    .                   => ProbeAck[Data]

    AccessAck      = 0 #                         .    .
    AccessAckData  = 1 #                         .    .
    ProbeAck       = 2 #                         .
    ProbeAckData   = 3 #                         .
    Release        = 4 #                         .              => ReleaseAck
    ReleaseData    = 5 #                         .              => ReleaseAck
    Grant          = 2 #                              .         => GrantAck
    GrantData      = 3 #                              .         => GrantAck
    ReleaseAck     = 4 #                              .
    AccessAckError = 6 #                         .    .


class TLPermissions:
    # Cap types (Grant = new permissions, Probe = permisions <= target)
    toT = 0
    toB = 1
    toN = 2

    # Grow types (Acquire = permissions >= target)
    NtoB = 0
    NtoT = 1
    BtoT = 2

    # Shrink types (ProbeAck, Release)
    TtoB = 0
    TtoN = 1
    BtoN = 2

    # Report types (ProbeAck)
    TtoT = 3
    BtoB = 4
    NtoN = 5

    @staticmethod
    def isCap(x: int) -> bool:    return 0 <= x <= TLPermissions.toN
    @staticmethod
    def isGrow(x: int) -> bool:   return 0 <= x <= TLPermissions.BtoT
    @staticmethod
    def isShrink(x: int) -> bool: return 0 <= x <= TLPermissions.BtoN
    @staticmethod
    def isReport(x: int) -> bool: return 0 <= x <= TLPermissions.NtoN


class TLAtomics:
    # Arithmetic types
    MIN  = 0
    MAX  = 1
    MINU = 2
    MAXU = 3
    ADD  = 4

    # Logical types
    XOR  = 0
    OR   = 1
    AND  = 2
    SWAP = 3

    @staticmethod
    def isArithmetic(x: int) -> bool: return 0 <= x <= TLAtomics.ADD
    @staticmethod
    def isLogical(x: int) -> bool:    return 0 <= x <= TLAtomics.SWAP


class TLHints:
    PREFETCH_READ  = 0
    PREFETCH_WRITE = 1

    @staticmethod
    def isHint(x: int) -> bool: return 0 <= x <= TLHints.PREFETCH_WRITE


# Fields hold ints once evaluated, or pyhcl nodes when built from hardware operands

@dataclass(frozen=True)
class TLBundleA:
    opcode:  Any
    param:   Any
    size:    Any
    source:  Any
    address: Any
    wmask:   Any
    data:    Any = 0

    # PutFullData, PutPartialData, ArithmeticData, LogicalData
    def hasData(self):
        if isinstance(self.opcode, int):
            return not (self.opcode & 4)
        return ~self.opcode[2]


@dataclass(frozen=True)
class TLBundleB:
    opcode:  Any
    param:   Any
    size:    Any
    source:  Any
    address: Any
    wmask:   Any
    data:    Any = 0

    def hasData(self):
        if isinstance(self.opcode, int):
            return not (self.opcode & 4)
        return ~self.opcode[2]


@dataclass(frozen=True)
class TLBundleC:
    opcode:  Any
    param:   Any
    size:    Any
    source:  Any
    address: Any
    data:    Any = 0

    # AccessAckData, ProbeAckData, ReleaseData
    def hasData(self):
        if isinstance(self.opcode, int):
            return bool(self.opcode & 1)
        return self.opcode[0]


@dataclass(frozen=True)
class TLBundleD:
    opcode: Any
    param:  Any
    size:   Any
    source: Any
    sink:   Any
    data:   Any = 0

    # AccessAckData, GrantData
    def hasData(self):
        if isinstance(self.opcode, int):
            return bool(self.opcode & 1)
        return self.opcode[0]


@dataclass(frozen=True)
class TLBundleE:
    sink: Any

    def hasData(self):
        return False
