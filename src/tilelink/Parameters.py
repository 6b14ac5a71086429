from __future__ import annotations
import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Optional, Sequence

from diplomacy.Parameters import AddressSet, IdRange, RegionType, TransferSizes
from helper.common import asBool, isLiteral, mux1H
from util.common import isPow2, log2Ceil, log2Up
from util.package import groupByIntoSeq, orR, pairs


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TLManagerParameters:
    address:            Sequence[AddressSet]
    sinkId:             IdRange       = IdRange(0, 1)
    regionType:         RegionType    = RegionType.UNCACHEABLE
    # Supports both Acquire+Release+Finish of these sizes
    supportsAcquire:    TransferSizes = TransferSizes()
    supportsArithmetic: TransferSizes = TransferSizes()
    supportsLogical:    TransferSizes = TransferSizes()
    supportsGet:        TransferSizes = TransferSizes()
    supportsPutFull:    TransferSizes = TransferSizes()
    supportsPutPartial: TransferSizes = TransferSizes()
    supportsHint:       bool          = False
    # If fifoId is set, all messages sent to the same fifoId are delivered in FIFO order
    fifoId:             Optional[int] = None
    name:               str           = ""

    def __post_init__(self):
        object.__setattr__(self, "address", tuple(self.address))
        assert self.address, f"Manager '{self.name}' must claim at least one AddressSet"
        for x, y in pairs(self.address):
            assert not x.overlaps(y), f"Manager '{self.name}' has overlapping AddressSets {x} and {y}"
        for a in self.address:
            assert self.supportsAcquire.none or a.alignment1 >= self.supportsAcquire.max - 1, \
                f"Manager '{self.name}' at {a} is not aligned to its Acquire size {self.supportsAcquire}"

    # Largest support transfer of all types
    @property
    def maxTransfer(self) -> int:
        return max(
            self.supportsAcquire.max,
            self.supportsArithmetic.max,
            self.supportsLogical.max,
            self.supportsGet.max,
            self.supportsPutFull.max,
            self.supportsPutPartial.max)

    @property
    def maxAddress(self) -> int:
        return max(a.max for a in self.address)

    def copy(self, **kwargs) -> TLManagerParameters:
        return replace(self, **kwargs)

    @property
    def infoString(self):
        return (f"Manager Name = {self.name}\n"
                f"address = {', '.join(str(a) for a in self.address)}\n"
                f"sinkId = {self.sinkId}\n"
                f"regionType = {self.regionType.name}\n"
                f"fifoId = {self.fifoId}\n")


@dataclass(frozen=True)
class TLClientParameters:
    sourceId:           IdRange       = IdRange(0, 1)
    # Supports both Probe+Grant of these sizes
    supportsProbe:      TransferSizes = TransferSizes()
    supportsArithmetic: TransferSizes = TransferSizes()
    supportsLogical:    TransferSizes = TransferSizes()
    supportsGet:        TransferSizes = TransferSizes()
    supportsPutFull:    TransferSizes = TransferSizes()
    supportsPutPartial: TransferSizes = TransferSizes()
    supportsHint:       bool          = False
    name:               str           = ""

    @property
    def maxTransfer(self) -> int:
        return max(
            self.supportsProbe.max,
            self.supportsArithmetic.max,
            self.supportsLogical.max,
            self.supportsGet.max,
            self.supportsPutFull.max,
            self.supportsPutPartial.max)

    def copy(self, **kwargs) -> TLClientParameters:
        return replace(self, **kwargs)

    @property
    def infoString(self):
        return f"Client Name = {self.name}\nsourceId = {self.sourceId}\n"


def _owners(endpoints, member: Callable, clash) -> str:
    i = next(i for i, e in enumerate(endpoints) if member(e) == clash[0])
    j = next(j for j, e in enumerate(endpoints) if member(e) == clash[1] and j != i)
    return f"'{endpoints[i].name or i}' and '{endpoints[j].name or j}'"


@dataclass(frozen=True)
class TLManagerPortParameters:
    managers:  Sequence[TLManagerParameters]
    beatBytes: int

    def __post_init__(self):
        object.__setattr__(self, "managers", tuple(self.managers))
        assert self.managers, "Manager ports must have managers"
        assert isPow2(self.beatBytes), f"Data channel width must be a power of 2, got: {self.beatBytes}"

        # Require disjoint ranges for Ids and addresses
        clash = IdRange.overlaps([m.sinkId for m in self.managers])
        assert clash is None, \
            f"Managers {_owners(self.managers, lambda m: m.sinkId, clash)} have overlapping sinkIds {clash[0]} and {clash[1]}"
        for (i, x), (j, y) in pairs(list(enumerate(self.managers))):
            for a in x.address:
                for b in y.address:
                    assert not a.overlaps(b), \
                        f"Managers '{x.name or i}' and '{y.name or j}' have overlapping AddressSets {a} and {b}"

        logger.debug("Manager port with %d managers, beatBytes = %d", len(self.managers), self.beatBytes)

    # Bounds on required sizes
    @property
    def endSinkId(self):   return max(m.sinkId.end for m in self.managers)
    @property
    def maxAddress(self):  return max(m.maxAddress for m in self.managers)
    @property
    def maxTransfer(self): return max(m.maxTransfer for m in self.managers)

    # Operation sizes supported by all outward Managers
    def _allSupport(self, member: Callable[[TLManagerParameters], TransferSizes]) -> TransferSizes:
        return TransferSizes.intersect([member(m) for m in self.managers])

    @property
    def allSupportAcquire(self):    return self._allSupport(lambda m: m.supportsAcquire)
    @property
    def allSupportArithmetic(self): return self._allSupport(lambda m: m.supportsArithmetic)
    @property
    def allSupportLogical(self):    return self._allSupport(lambda m: m.supportsLogical)
    @property
    def allSupportGet(self):        return self._allSupport(lambda m: m.supportsGet)
    @property
    def allSupportPutFull(self):    return self._allSupport(lambda m: m.supportsPutFull)
    @property
    def allSupportPutPartial(self): return self._allSupport(lambda m: m.supportsPutPartial)
    @property
    def allSupportHint(self):       return all(m.supportsHint for m in self.managers)

    # Operation supported by at least one outward Manager
    def _anySupport(self, member: Callable[[TLManagerParameters], TransferSizes]) -> bool:
        return TransferSizes.mincover([member(m) for m in self.managers]).supported

    @property
    def anySupportAcquire(self):    return self._anySupport(lambda m: m.supportsAcquire)
    @property
    def anySupportArithmetic(self): return self._anySupport(lambda m: m.supportsArithmetic)
    @property
    def anySupportLogical(self):    return self._anySupport(lambda m: m.supportsLogical)
    @property
    def anySupportGet(self):        return self._anySupport(lambda m: m.supportsGet)
    @property
    def anySupportPutFull(self):    return self._anySupport(lambda m: m.supportsPutFull)
    @property
    def anySupportPutPartial(self): return self._anySupport(lambda m: m.supportsPutPartial)
    @property
    def anySupportHint(self):       return any(m.supportsHint for m in self.managers)

    # One entry per manager; at most one is set because the address sets are disjoint
    def find(self, address) -> List[Any]:
        return [orR([a.contains(address) for a in m.address]) for m in self.managers]

    def findById(self, id) -> List[Any]:
        return [m.sinkId.contains(id) for m in self.managers]

    # These return Optional[TLManagerParameters] for your convenience
    def lookup(self, address: int) -> Optional[TLManagerParameters]:
        return next((m for m, hit in zip(self.managers, self.find(address)) if hit), None)

    def lookupById(self, id: int) -> Optional[TLManagerParameters]:
        return next((m for m, hit in zip(self.managers, self.findById(id)) if hit), None)

    # Does this Port manage this ID/address?
    def contains(self, address):
        return orR(self.find(address))

    def containsById(self, id):
        return orR(self.findById(id))

    def _safetyHelper(self, member: Callable[[TLManagerParameters], TransferSizes], address, lgSize):
        hits = self.find(address)
        sizes = [member(m).containsLg(lgSize) for m in self.managers]
        if isLiteral(address, lgSize):
            return any(m and s for m, s in zip(hits, sizes))
        return orR([asBool(m) & asBool(s) for m, s in zip(hits, sizes)])

    # Check for support of a given operation at a specific address
    def supportsAcquire(self, address, lgSize):    return self._safetyHelper(lambda m: m.supportsAcquire,    address, lgSize)
    def supportsArithmetic(self, address, lgSize): return self._safetyHelper(lambda m: m.supportsArithmetic, address, lgSize)
    def supportsLogical(self, address, lgSize):    return self._safetyHelper(lambda m: m.supportsLogical,    address, lgSize)
    def supportsGet(self, address, lgSize):        return self._safetyHelper(lambda m: m.supportsGet,        address, lgSize)
    def supportsPutFull(self, address, lgSize):    return self._safetyHelper(lambda m: m.supportsPutFull,    address, lgSize)
    def supportsPutPartial(self, address, lgSize): return self._safetyHelper(lambda m: m.supportsPutPartial, address, lgSize)

    def supportsHint(self, address):
        hits = self.find(address)
        if isLiteral(address):
            return any(m and m_.supportsHint for m, m_ in zip(hits, self.managers))
        return orR([m & asBool(m_.supportsHint) for m, m_ in zip(hits, self.managers)])

    # Managers sharing a fifoId are delivered to in order
    def fifoDomains(self) -> Dict[int, List[TLManagerParameters]]:
        ordered = [m for m in self.managers if m.fifoId is not None]
        return dict(groupByIntoSeq(ordered)(lambda m: m.fifoId))

    # Note: returns the actual fifoId + 1 or 0 if None
    def findFifoId(self, address):
        return mux1H(self.find(address), [0 if m.fifoId is None else m.fifoId + 1 for m in self.managers])

    @property
    def infoString(self):
        return f"Manager Port Beatbytes = {self.beatBytes}\n\n" + "".join(m.infoString for m in self.managers)


@dataclass(frozen=True)
class TLClientPortParameters:
    clients: Sequence[TLClientParameters]

    def __post_init__(self):
        object.__setattr__(self, "clients", tuple(self.clients))
        assert self.clients, "Client ports must have clients"

        # Require disjoint ranges for Ids
        clash = IdRange.overlaps([c.sourceId for c in self.clients])
        assert clash is None, \
            f"Clients {_owners(self.clients, lambda c: c.sourceId, clash)} have overlapping sourceIds {clash[0]} and {clash[1]}"

        logger.debug("Client port with %d clients", len(self.clients))

    # Bounds on required sizes
    @property
    def endSourceId(self): return max(c.sourceId.end for c in self.clients)
    @property
    def maxTransfer(self): return max(c.maxTransfer for c in self.clients)

    # Operation sizes supported by all inward Clients
    def _allSupport(self, member: Callable[[TLClientParameters], TransferSizes]) -> TransferSizes:
        return TransferSizes.intersect([member(c) for c in self.clients])

    @property
    def allSupportProbe(self):      return self._allSupport(lambda c: c.supportsProbe)
    @property
    def allSupportArithmetic(self): return self._allSupport(lambda c: c.supportsArithmetic)
    @property
    def allSupportLogical(self):    return self._allSupport(lambda c: c.supportsLogical)
    @property
    def allSupportGet(self):        return self._allSupport(lambda c: c.supportsGet)
    @property
    def allSupportPutFull(self):    return self._allSupport(lambda c: c.supportsPutFull)
    @property
    def allSupportPutPartial(self): return self._allSupport(lambda c: c.supportsPutPartial)
    @property
    def allSupportHint(self):       return all(c.supportsHint for c in self.clients)

    # Operation supported by at least one inward Client
    def _anySupport(self, member: Callable[[TLClientParameters], TransferSizes]) -> bool:
        return TransferSizes.mincover([member(c) for c in self.clients]).supported

    @property
    def anySupportProbe(self):      return self._anySupport(lambda c: c.supportsProbe)
    @property
    def anySupportArithmetic(self): return self._anySupport(lambda c: c.supportsArithmetic)
    @property
    def anySupportLogical(self):    return self._anySupport(lambda c: c.supportsLogical)
    @property
    def anySupportGet(self):        return self._anySupport(lambda c: c.supportsGet)
    @property
    def anySupportPutFull(self):    return self._anySupport(lambda c: c.supportsPutFull)
    @property
    def anySupportPutPartial(self): return self._anySupport(lambda c: c.supportsPutPartial)
    @property
    def anySupportHint(self):       return any(c.supportsHint for c in self.clients)

    def find(self, id) -> List[Any]:
        return [c.sourceId.contains(id) for c in self.clients]

    def lookup(self, id: int) -> Optional[TLClientParameters]:
        return next((c for c, hit in zip(self.clients, self.find(id)) if hit), None)

    def contains(self, id):
        return orR(self.find(id))

    def _safetyHelper(self, member: Callable[[TLClientParameters], TransferSizes], id, lgSize):
        hits = self.find(id)
        sizes = [member(c).containsLg(lgSize) for c in self.clients]
        if isLiteral(id, lgSize):
            return any(c and s for c, s in zip(hits, sizes))
        return orR([asBool(c) & asBool(s) for c, s in zip(hits, sizes)])

    # Check for support of a given operation at a specific id
    def supportsProbe(self, id, lgSize):      return self._safetyHelper(lambda c: c.supportsProbe,      id, lgSize)
    def supportsArithmetic(self, id, lgSize): return self._safetyHelper(lambda c: c.supportsArithmetic, id, lgSize)
    def supportsLogical(self, id, lgSize):    return self._safetyHelper(lambda c: c.supportsLogical,    id, lgSize)
    def supportsGet(self, id, lgSize):        return self._safetyHelper(lambda c: c.supportsGet,        id, lgSize)
    def supportsPutFull(self, id, lgSize):    return self._safetyHelper(lambda c: c.supportsPutFull,    id, lgSize)
    def supportsPutPartial(self, id, lgSize): return self._safetyHelper(lambda c: c.supportsPutPartial, id, lgSize)

    def supportsHint(self, id):
        hits = self.find(id)
        if isLiteral(id):
            return any(h and c.supportsHint for h, c in zip(hits, self.clients))
        return orR([h & asBool(c.supportsHint) for h, c in zip(hits, self.clients)])

    @property
    def infoString(self):
        return "".join(c.infoString for c in self.clients)


@dataclass(frozen=True)
class TLBundleParameters:
    addressBits: int
    dataBits:    int
    sourceBits:  int
    sinkBits:    int
    sizeBits:    int

    def __post_init__(self):
        # no 0-width wires
        assert self.addressBits >= 1, f"addressBits must be positive, got: {self.addressBits}"
        assert self.dataBits    >= 1, f"dataBits must be positive, got: {self.dataBits}"
        assert self.sourceBits  >= 1, f"sourceBits must be positive, got: {self.sourceBits}"
        assert self.sinkBits    >= 1, f"sinkBits must be positive, got: {self.sinkBits}"
        assert self.sizeBits    >= 1, f"sizeBits must be positive, got: {self.sizeBits}"
        assert isPow2(self.dataBits), f"dataBits must be a power of 2, got: {self.dataBits}"

    def union(self, x: TLBundleParameters) -> TLBundleParameters:
        return TLBundleParameters(
            max(self.addressBits, x.addressBits),
            max(self.dataBits,    x.dataBits),
            max(self.sourceBits,  x.sourceBits),
            max(self.sinkBits,    x.sinkBits),
            max(self.sizeBits,    x.sizeBits))


@dataclass(frozen=True)
class TLEdgeParameters:
    client:  TLClientPortParameters
    manager: TLManagerPortParameters

    def __post_init__(self):
        maxTransfer = max(self.client.maxTransfer, self.manager.maxTransfer)

        # Sanity check the link...
        assert maxTransfer >= self.manager.beatBytes, \
            f"Link max transfer {maxTransfer} is smaller than one {self.manager.beatBytes}-byte beat"

        maxLgSize = log2Ceil(maxTransfer)
        bundle = TLBundleParameters(
            addressBits = log2Up(self.manager.maxAddress + 1),
            dataBits    = self.manager.beatBytes * 8,
            sourceBits  = log2Up(self.client.endSourceId),
            sinkBits    = log2Up(self.manager.endSinkId),
            sizeBits    = log2Up(maxLgSize + 1))

        object.__setattr__(self, "maxTransfer", maxTransfer)
        object.__setattr__(self, "maxLgSize", maxLgSize)
        object.__setattr__(self, "bundle", bundle)

        logger.debug("Edge maxTransfer = %d, bundle = %s", maxTransfer, bundle)
