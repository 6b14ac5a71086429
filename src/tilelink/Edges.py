from __future__ import annotations
import logging
from typing import Any, List, Tuple

from pyhcl import Bool, CatBits, Mux, U
from helper.common import asBool, isLiteral
from tilelink.Bundles import (TLAtomics, TLBundleA, TLBundleB, TLBundleC, TLBundleD, TLBundleE,
                              TLHints, TLMessages, TLPermissions)
from tilelink.Parameters import TLEdgeParameters
from util.common import log2Ceil


logger = logging.getLogger(__name__)


class TLEdge(TLEdgeParameters):

    # Every byte lane of a beat; used where the whole beat is always enabled
    @property
    def allLanes(self) -> int:
        return (1 << self.manager.beatBytes) - 1

    def isAligned(self, address, lgSize):
        if self.maxLgSize == 0:
            return True if isLiteral(address, lgSize) else Bool(True)
        if isLiteral(address, lgSize):
            return (address & ((1 << min(lgSize, self.maxLgSize)) - 1)) == 0
        if isinstance(lgSize, int):
            mask = U((1 << min(lgSize, self.maxLgSize)) - 1)
        else:
            mask = CatBits(*[U(i) < lgSize for i in reversed(range(self.maxLgSize))])
        if isinstance(address, int):
            address = U(address)
        return (address & mask) == U(0)

    # This gets used everywhere, so make the smallest circuit possible ...
    def fullMask(self, address, lgSize):
        lgBytes = log2Ceil(self.manager.beatBytes)
        literal = isLiteral(address, lgSize)

        def sizeIs(n: int):
            if isinstance(lgSize, int):
                return lgSize == n if literal else Bool(lgSize == n)
            return lgSize == U(n)

        def addressBit(n: int):
            if isinstance(address, int):
                bit = bool((address >> n) & 1)
                return (bit, not bit) if literal else (Bool(bit), Bool(not bit))
            return (address[n], ~address[n])

        # returns (acc, eq) per lane of a 2^i-lane beat; acc selects the lane,
        # eq means the address bits seen so far point at it
        def helper(i: int) -> List[Tuple[Any, Any]]:
            if i == 0:
                if isinstance(lgSize, int):
                    big = lgSize >= lgBytes
                    return [(big, True)] if literal else [(Bool(big), Bool(True))]
                return [(U(lgBytes) <= lgSize, Bool(True))]
            sub = helper(i - 1)
            size = sizeIs(lgBytes - i)
            bit, nbit = addressBit(lgBytes - i)
            ret = []
            for j in range(1 << i):
                sub_acc, sub_eq = sub[j // 2]
                eq = sub_eq & (bit if j % 2 == 1 else nbit)
                acc = sub_acc | (size & eq)
                ret.append((acc, eq))
            return ret

        lanes = [acc for acc, _ in helper(lgBytes)]
        if literal:
            return sum(1 << j for j, acc in enumerate(lanes) if acc)
        return CatBits(*reversed(lanes))

    def numBeats(self, bundle):
        hasData = bundle.hasData()
        if hasData is False:
            return 1
        size = bundle.size
        cutoff = log2Ceil(self.manager.beatBytes)
        if isinstance(size, int):
            beats = 1 if size <= cutoff else 1 << (size - cutoff)
            return beats if hasData is True else Mux(hasData, U(beats), U(1))
        small = size <= U(cutoff)
        decode = [U(i + cutoff) == size for i in range(1 + self.maxLgSize - cutoff)]
        return Mux(~asBool(hasData) | small, U(1), CatBits(*reversed(decode)))

    def _request(self, legal, bundle):
        if legal is False:
            logger.debug("Illegal request %s on edge with maxTransfer %d", bundle, self.maxTransfer)
        return (legal, bundle)


class TLEdgeOut(TLEdge):

    # Transfers
    def Acquire(self, fromSource, toAddress, lgSize, growPermissions):
        assert self.manager.anySupportAcquire, "No manager on this edge supports Acquire"
        assert not isLiteral(growPermissions) or TLPermissions.isGrow(growPermissions), \
            f"Acquire needs a grow permission, got: {growPermissions}"
        legal = self.manager.supportsAcquire(toAddress, lgSize)
        a = TLBundleA(
            opcode  = TLMessages.Acquire,
            param   = growPermissions,
            size    = lgSize,
            source  = fromSource,
            address = toAddress,
            wmask   = self.allLanes,
            data    = 0)
        return self._request(legal, a)

    def Release(self, fromSource, toAddress, lgSize, shrinkPermissions):
        assert self.manager.anySupportAcquire, "No manager on this edge supports Release"
        assert not isLiteral(shrinkPermissions) or TLPermissions.isShrink(shrinkPermissions), \
            f"Release needs a shrink permission, got: {shrinkPermissions}"
        legal = self.manager.supportsAcquire(toAddress, lgSize)
        c = TLBundleC(
            opcode  = TLMessages.Release,
            param   = shrinkPermissions,
            size    = lgSize,
            source  = fromSource,
            address = toAddress,
            data    = 0)
        return self._request(legal, c)

    def ReleaseData(self, fromSource, toAddress, lgSize, shrinkPermissions, data):
        assert self.manager.anySupportAcquire, "No manager on this edge supports Release"
        assert not isLiteral(shrinkPermissions) or TLPermissions.isShrink(shrinkPermissions), \
            f"ReleaseData needs a shrink permission, got: {shrinkPermissions}"
        legal = self.manager.supportsAcquire(toAddress, lgSize)
        c = TLBundleC(
            opcode  = TLMessages.ReleaseData,
            param   = shrinkPermissions,
            size    = lgSize,
            source  = fromSource,
            address = toAddress,
            data    = data)
        return self._request(legal, c)

    def ProbeAck(self, toAddress, lgSize, reportPermissions, fromSource = 0):
        return TLBundleC(
            opcode  = TLMessages.ProbeAck,
            param   = reportPermissions,
            size    = lgSize,
            source  = fromSource,
            address = toAddress,
            data    = 0)

    def ProbeAckData(self, toAddress, lgSize, reportPermissions, data, fromSource = 0):
        return TLBundleC(
            opcode  = TLMessages.ProbeAckData,
            param   = reportPermissions,
            size    = lgSize,
            source  = fromSource,
            address = toAddress,
            data    = data)

    def GrantAck(self, toSink):
        return TLBundleE(sink = toSink)

    # Accesses
    def Get(self, fromSource, toAddress, lgSize):
        assert self.manager.anySupportGet, "No manager on this edge supports Get"
        legal = self.manager.supportsGet(toAddress, lgSize)
        a = TLBundleA(
            opcode  = TLMessages.Get,
            param   = 0,
            size    = lgSize,
            source  = fromSource,
            address = toAddress,
            wmask   = self.fullMask(toAddress, lgSize),
            data    = 0)
        return self._request(legal, a)

    def Put(self, fromSource, toAddress, lgSize, data):
        assert self.manager.anySupportPutFull, "No manager on this edge supports PutFull"
        legal = self.manager.supportsPutFull(toAddress, lgSize)
        a = TLBundleA(
            opcode  = TLMessages.PutFullData,
            param   = 0,
            size    = lgSize,
            source  = fromSource,
            address = toAddress,
            wmask   = self.fullMask(toAddress, lgSize),
            data    = data)
        return self._request(legal, a)

    def PutPartial(self, fromSource, toAddress, lgSize, data, wmask):
        assert self.manager.anySupportPutPartial, "No manager on this edge supports PutPartial"
        legal = self.manager.supportsPutPartial(toAddress, lgSize)
        a = TLBundleA(
            opcode  = TLMessages.PutPartialData,
            param   = 0,
            size    = lgSize,
            source  = fromSource,
            address = toAddress,
            wmask   = wmask,
            data    = data)
        return self._request(legal, a)

    def Arithmetic(self, fromSource, toAddress, lgSize, data, atomic):
        assert self.manager.anySupportArithmetic, "No manager on this edge supports Arithmetic"
        assert not isLiteral(atomic) or TLAtomics.isArithmetic(atomic), f"Unknown arithmetic atomic: {atomic}"
        legal = self.manager.supportsArithmetic(toAddress, lgSize)
        a = TLBundleA(
            opcode  = TLMessages.ArithmeticData,
            param   = atomic,
            size    = lgSize,
            source  = fromSource,
            address = toAddress,
            wmask   = self.fullMask(toAddress, lgSize),
            data    = data)
        return self._request(legal, a)

    def Logical(self, fromSource, toAddress, lgSize, data, atomic):
        assert self.manager.anySupportLogical, "No manager on this edge supports Logical"
        assert not isLiteral(atomic) or TLAtomics.isLogical(atomic), f"Unknown logical atomic: {atomic}"
        legal = self.manager.supportsLogical(toAddress, lgSize)
        a = TLBundleA(
            opcode  = TLMessages.LogicalData,
            param   = atomic,
            size    = lgSize,
            source  = fromSource,
            address = toAddress,
            wmask   = self.fullMask(toAddress, lgSize),
            data    = data)
        return self._request(legal, a)

    def Hint(self, fromSource, toAddress, lgSize, param):
        assert self.manager.anySupportHint, "No manager on this edge supports Hint"
        assert not isLiteral(param) or TLHints.isHint(param), f"Unknown hint: {param}"
        legal = self.manager.supportsHint(toAddress)
        a = TLBundleA(
            opcode  = TLMessages.Hint,
            param   = param,
            size    = lgSize,
            source  = fromSource,
            address = toAddress,
            wmask   = self.fullMask(toAddress, lgSize),
            data    = 0)
        return self._request(legal, a)

    def AccessAck(self, toAddress, lgSize, fromSource = 0):
        return TLBundleC(
            opcode  = TLMessages.AccessAck,
            param   = 0,
            size    = lgSize,
            source  = fromSource,
            address = toAddress,
            data    = 0)

    def AccessAckData(self, toAddress, lgSize, data, fromSource = 0):
        return TLBundleC(
            opcode  = TLMessages.AccessAckData,
            param   = 0,
            size    = lgSize,
            source  = fromSource,
            address = toAddress,
            data    = data)

    def AccessAckError(self, toAddress, lgSize, fromSource = 0):
        return TLBundleC(
            opcode  = TLMessages.AccessAckError,
            param   = 0,
            size    = lgSize,
            source  = fromSource,
            address = toAddress,
            data    = 0)


class TLEdgeIn(TLEdge):

    # Transfers
    def Probe(self, fromAddress, toSource, lgSize, capPermissions):
        assert self.client.anySupportProbe, "No client on this edge supports Probe"
        assert not isLiteral(capPermissions) or TLPermissions.isCap(capPermissions), \
            f"Probe needs a cap permission, got: {capPermissions}"
        legal = self.client.supportsProbe(toSource, lgSize)
        b = TLBundleB(
            opcode  = TLMessages.Probe,
            param   = capPermissions,
            size    = lgSize,
            source  = toSource,
            address = fromAddress,
            wmask   = self.allLanes,
            data    = 0)
        return self._request(legal, b)

    def Grant(self, fromSink, toSource, lgSize, capPermissions):
        return TLBundleD(
            opcode = TLMessages.Grant,
            param  = capPermissions,
            size   = lgSize,
            source = toSource,
            sink   = fromSink,
            data   = 0)

    def GrantData(self, fromSink, toSource, lgSize, capPermissions, data):
        return TLBundleD(
            opcode = TLMessages.GrantData,
            param  = capPermissions,
            size   = lgSize,
            source = toSource,
            sink   = fromSink,
            data   = data)

    def ReleaseAck(self, toSource, lgSize):
        return TLBundleD(
            opcode = TLMessages.ReleaseAck,
            param  = 0,
            size   = lgSize,
            source = toSource,
            sink   = 0,
            data   = 0)

    # Accesses
    def Get(self, fromAddress, toSource, lgSize):
        assert self.client.anySupportGet, "No client on this edge supports Get"
        legal = self.client.supportsGet(toSource, lgSize)
        b = TLBundleB(
            opcode  = TLMessages.Get,
            param   = 0,
            size    = lgSize,
            source  = toSource,
            address = fromAddress,
            wmask   = self.fullMask(fromAddress, lgSize),
            data    = 0)
        return self._request(legal, b)

    def Put(self, fromAddress, toSource, lgSize, data):
        assert self.client.anySupportPutFull, "No client on this edge supports PutFull"
        legal = self.client.supportsPutFull(toSource, lgSize)
        b = TLBundleB(
            opcode  = TLMessages.PutFullData,
            param   = 0,
            size    = lgSize,
            source  = toSource,
            address = fromAddress,
            wmask   = self.fullMask(fromAddress, lgSize),
            data    = data)
        return self._request(legal, b)

    def PutPartial(self, fromAddress, toSource, lgSize, data, wmask):
        assert self.client.anySupportPutPartial, "No client on this edge supports PutPartial"
        legal = self.client.supportsPutPartial(toSource, lgSize)
        b = TLBundleB(
            opcode  = TLMessages.PutPartialData,
            param   = 0,
            size    = lgSize,
            source  = toSource,
            address = fromAddress,
            wmask   = wmask,
            data    = data)
        return self._request(legal, b)

    def Arithmetic(self, fromAddress, toSource, lgSize, data, atomic):
        assert self.client.anySupportArithmetic, "No client on this edge supports Arithmetic"
        assert not isLiteral(atomic) or TLAtomics.isArithmetic(atomic), f"Unknown arithmetic atomic: {atomic}"
        legal = self.client.supportsArithmetic(toSource, lgSize)
        b = TLBundleB(
            opcode  = TLMessages.ArithmeticData,
            param   = atomic,
            size    = lgSize,
            source  = toSource,
            address = fromAddress,
            wmask   = self.fullMask(fromAddress, lgSize),
            data    = data)
        return self._request(legal, b)

    def Logical(self, fromAddress, toSource, lgSize, data, atomic):
        assert self.client.anySupportLogical, "No client on this edge supports Logical"
        assert not isLiteral(atomic) or TLAtomics.isLogical(atomic), f"Unknown logical atomic: {atomic}"
        legal = self.client.supportsLogical(toSource, lgSize)
        b = TLBundleB(
            opcode  = TLMessages.LogicalData,
            param   = atomic,
            size    = lgSize,
            source  = toSource,
            address = fromAddress,
            wmask   = self.fullMask(fromAddress, lgSize),
            data    = data)
        return self._request(legal, b)

    def Hint(self, fromAddress, toSource, lgSize, param):
        assert self.client.anySupportHint, "No client on this edge supports Hint"
        assert not isLiteral(param) or TLHints.isHint(param), f"Unknown hint: {param}"
        legal = self.client.supportsHint(toSource)
        b = TLBundleB(
            opcode  = TLMessages.Hint,
            param   = param,
            size    = lgSize,
            source  = toSource,
            address = fromAddress,
            wmask   = self.fullMask(fromAddress, lgSize),
            data    = 0)
        return self._request(legal, b)

    def AccessAck(self, toSource, lgSize):
        return TLBundleD(
            opcode = TLMessages.AccessAck,
            param  = 0,
            size   = lgSize,
            source = toSource,
            sink   = 0,
            data   = 0)

    def AccessAckData(self, toSource, lgSize, data):
        return TLBundleD(
            opcode = TLMessages.AccessAckData,
            param  = 0,
            size   = lgSize,
            source = toSource,
            sink   = 0,
            data   = data)

    def AccessAckError(self, toSource, lgSize):
        return TLBundleD(
            opcode = TLMessages.AccessAckError,
            param  = 0,
            size   = lgSize,
            source = toSource,
            sink   = 0,
            data   = 0)
