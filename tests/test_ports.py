"""
Tests for endpoint capability records and the port-wide aggregates built from them.
"""

import pytest

from diplomacy.Parameters import AddressSet, IdRange, RegionType, TransferSizes
from tilelink.Parameters import (TLClientParameters, TLClientPortParameters, TLManagerParameters,
                                 TLManagerPortParameters)


# =============================================================================
# ENDPOINT RECORDS
# =============================================================================

class TestManagerParameters:

    def test_defaults(self):
        m = TLManagerParameters(address = [AddressSet(0xff, 0x0)])
        assert m.sinkId == IdRange(0, 1)
        assert m.regionType == RegionType.UNCACHEABLE
        assert m.supportsGet.none
        assert m.supportsHint is False
        assert m.fifoId is None
        assert m.maxTransfer == 0

    def test_address_is_required(self):
        with pytest.raises(AssertionError, match="at least one AddressSet"):
            TLManagerParameters(address = [])

    def test_own_address_sets_must_be_disjoint(self):
        with pytest.raises(AssertionError, match="overlapping AddressSets"):
            TLManagerParameters(name = "ram", address = [AddressSet(0xff, 0x100), AddressSet(0xf, 0x110)])

    def test_acquire_needs_aligned_regions(self):
        with pytest.raises(AssertionError, match="not aligned"):
            TLManagerParameters(address = [AddressSet(0xf, 0x0)], supportsAcquire = TransferSizes(64))
        # exactly one block is fine
        TLManagerParameters(address = [AddressSet(0x3f, 0x0)], supportsAcquire = TransferSizes(64))

    def test_max_transfer_and_address(self, memory):
        assert memory.maxTransfer == 64
        assert memory.maxAddress == 0x8fffffff

    def test_copy_produces_new_record(self, memory):
        slow = memory.copy(supportsGet = TransferSizes(1, 8))
        assert slow.supportsGet == TransferSizes(1, 8)
        assert memory.supportsGet == TransferSizes(1, 64)
        assert slow.address == memory.address

    def test_records_are_immutable(self, memory):
        with pytest.raises(AttributeError):
            memory.fifoId = 3


class TestClientParameters:

    def test_max_transfer(self, core):
        assert core.maxTransfer == 64

    def test_default_source(self):
        assert TLClientParameters().sourceId == IdRange(0, 1)


# =============================================================================
# MANAGER PORT
# =============================================================================

class TestManagerPort:

    def test_requires_managers(self):
        with pytest.raises(AssertionError, match="must have managers"):
            TLManagerPortParameters([], beatBytes = 8)

    def test_beat_bytes_power_of_two(self, memory):
        with pytest.raises(AssertionError, match="power of 2"):
            TLManagerPortParameters([memory], beatBytes = 12)

    def test_overlapping_addresses_fail(self):
        a = TLManagerParameters(name = "a", address = [AddressSet(0xfff, 0x0)], sinkId = IdRange(0, 1))
        b = TLManagerParameters(name = "b", address = [AddressSet(0xff, 0x100)], sinkId = IdRange(1, 2))
        with pytest.raises(AssertionError, match="'a' and 'b' have overlapping AddressSets"):
            TLManagerPortParameters([a, b], beatBytes = 4)

    def test_unnamed_overlapping_addresses_report_indices(self):
        a = TLManagerParameters(address = [AddressSet(0xff, 0x100)], sinkId = IdRange(0, 1))
        b = TLManagerParameters(address = [AddressSet(0xf, 0x110)], sinkId = IdRange(1, 2))
        with pytest.raises(AssertionError, match="'0' and '1' have overlapping AddressSets"):
            TLManagerPortParameters([a, b], beatBytes = 4)

    def test_overlapping_sink_ids_fail(self):
        a = TLManagerParameters(name = "a", address = [AddressSet(0xff, 0x0)], sinkId = IdRange(0, 2))
        b = TLManagerParameters(name = "b", address = [AddressSet(0xff, 0x100)], sinkId = IdRange(1, 3))
        with pytest.raises(AssertionError, match="'a' and 'b' have overlapping sinkIds"):
            TLManagerPortParameters([a, b], beatBytes = 4)

    def test_identical_default_sink_ids_fail(self):
        a = TLManagerParameters(name = "a", address = [AddressSet(0xff, 0x0)])
        b = TLManagerParameters(name = "b", address = [AddressSet(0xff, 0x100)])
        with pytest.raises(AssertionError, match="'a' and 'b'"):
            TLManagerPortParameters([a, b], beatBytes = 4)

    def test_bounds(self, managerPort):
        assert managerPort.endSinkId == 2
        assert managerPort.maxAddress == 0x8fffffff
        assert managerPort.maxTransfer == 64

    def test_find(self, managerPort):
        assert managerPort.find(0x80000010) == [True, False]
        assert managerPort.find(0x2ffc) == [False, True]
        assert managerPort.find(0x10) == [False, False]

    def test_find_matches_at_most_one(self, managerPort):
        for address in range(0x0, 0x4000, 0x40):
            assert sum(managerPort.find(address)) <= 1
        for address in range(0x80000000, 0x80004000, 0x40):
            assert sum(managerPort.find(address)) == 1

    def test_lookup(self, managerPort, memory, device):
        assert managerPort.lookup(0x80000000) == memory
        assert managerPort.lookup(0x2000) == device
        assert managerPort.lookup(0x0) is None
        assert managerPort.lookupById(1) == device
        assert managerPort.lookupById(5) is None

    def test_contains(self, managerPort):
        assert managerPort.contains(0x2000)
        assert not managerPort.contains(0x3000)
        assert managerPort.containsById(0)
        assert not managerPort.containsById(2)
        assert managerPort.findById(1) == [False, True]

    def test_supports_get(self, managerPort):
        assert managerPort.supportsGet(0x80000000, 6)
        assert not managerPort.supportsGet(0x80000000, 7)
        assert managerPort.supportsGet(0x2000, 2)
        assert not managerPort.supportsGet(0x2000, 3)
        assert not managerPort.supportsGet(0x0, 0)

    def test_supports_other_operations(self, managerPort):
        assert managerPort.supportsAcquire(0x80000040, 6)
        assert not managerPort.supportsAcquire(0x80000040, 5)
        assert not managerPort.supportsAcquire(0x2000, 6)
        assert managerPort.supportsPutFull(0x80000000, 3)
        assert not managerPort.supportsPutFull(0x2000, 0)
        assert managerPort.supportsPutPartial(0x80000000, 3)
        assert not managerPort.supportsPutPartial(0x80000000, 4)
        assert managerPort.supportsArithmetic(0x80000000, 2)
        assert not managerPort.supportsArithmetic(0x80000000, 1)
        assert managerPort.supportsLogical(0x80000000, 3)
        assert managerPort.supportsHint(0x80000000)
        assert not managerPort.supportsHint(0x2000)
        assert not managerPort.supportsHint(0x0)

    def test_all_support_is_intersection(self, managerPort):
        assert managerPort.allSupportGet == TransferSizes(1, 4)
        assert managerPort.allSupportPutFull.none
        assert managerPort.allSupportAcquire.none
        assert managerPort.allSupportHint is False

    def test_any_support(self, managerPort):
        assert managerPort.anySupportGet
        assert managerPort.anySupportPutFull
        assert managerPort.anySupportAcquire
        assert managerPort.anySupportHint

    def test_fifo_domains(self, memory, device):
        rom = TLManagerParameters(
            name = "rom", address = [AddressSet(0xffff, 0x10000)], sinkId = IdRange(2, 3),
            supportsGet = TransferSizes(1, 8), fifoId = 0)
        port = TLManagerPortParameters([memory, device, rom], beatBytes = 8)
        assert port.fifoDomains() == {0: [memory, rom]}
        assert port.findFifoId(0x80000000) == 1
        assert port.findFifoId(0x10010) == 1
        assert port.findFifoId(0x2000) == 0
        assert port.findFifoId(0x0) == 0

    def test_info_string(self, managerPort):
        assert "Manager Port Beatbytes = 8" in managerPort.infoString
        assert "Manager Name = device" in managerPort.infoString


# =============================================================================
# CLIENT PORT
# =============================================================================

class TestClientPort:

    @pytest.fixture
    def dma(self) -> TLClientParameters:
        return TLClientParameters(name = "dma", sourceId = IdRange(4, 6), supportsGet = TransferSizes(1, 64), supportsHint = True)

    def test_requires_clients(self):
        with pytest.raises(AssertionError, match="must have clients"):
            TLClientPortParameters([])

    def test_overlapping_source_ids_fail(self, core):
        other = TLClientParameters(name = "other", sourceId = IdRange(3, 5))
        with pytest.raises(AssertionError, match="'core' and 'other' have overlapping sourceIds"):
            TLClientPortParameters([core, other])

    def test_bounds(self, core, dma):
        port = TLClientPortParameters([core, dma])
        assert port.endSourceId == 6
        assert port.maxTransfer == 64

    def test_find_and_lookup(self, core, dma):
        port = TLClientPortParameters([core, dma])
        assert port.find(5) == [False, True]
        assert port.lookup(2) == core
        assert port.lookup(6) is None
        assert port.contains(4)
        assert not port.contains(6)

    def test_supports(self, core, dma):
        port = TLClientPortParameters([core, dma])
        assert port.supportsProbe(0, 6)
        assert not port.supportsProbe(4, 6)
        assert port.supportsGet(4, 6)
        assert not port.supportsGet(0, 6)
        assert port.supportsGet(0, 3)
        assert port.supportsHint(5)
        assert not port.supportsHint(1)

    def test_aggregates(self, core, dma):
        port = TLClientPortParameters([core, dma])
        assert port.allSupportGet == TransferSizes(1, 8)
        assert port.allSupportProbe.none
        assert port.anySupportProbe
        assert port.anySupportHint
        assert port.allSupportHint is False
