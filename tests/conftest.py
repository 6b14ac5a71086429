import pytest

from diplomacy.Parameters import AddressSet, IdRange, RegionType, TransferSizes
from tilelink.Edges import TLEdgeIn, TLEdgeOut
from tilelink.Parameters import (TLClientParameters, TLClientPortParameters, TLManagerParameters,
                                 TLManagerPortParameters)


@pytest.fixture
def memory() -> TLManagerParameters:
    return TLManagerParameters(
        name               = "memory",
        address            = [AddressSet(0x0fffffff, 0x80000000)],
        sinkId             = IdRange(0, 1),
        regionType         = RegionType.TRACKED,
        supportsAcquire    = TransferSizes(64),
        supportsArithmetic = TransferSizes(4, 8),
        supportsLogical    = TransferSizes(4, 8),
        supportsGet        = TransferSizes(1, 64),
        supportsPutFull    = TransferSizes(1, 64),
        supportsPutPartial = TransferSizes(1, 8),
        supportsHint       = True,
        fifoId             = 0)


@pytest.fixture
def device() -> TLManagerParameters:
    return TLManagerParameters(
        name        = "device",
        address     = [AddressSet(0xfff, 0x2000)],
        sinkId      = IdRange(1, 2),
        supportsGet = TransferSizes(1, 4))


@pytest.fixture
def core() -> TLClientParameters:
    return TLClientParameters(
        name               = "core",
        sourceId           = IdRange(0, 4),
        supportsProbe      = TransferSizes(64),
        supportsGet        = TransferSizes(1, 8),
        supportsPutFull    = TransferSizes(1, 8),
        supportsPutPartial = TransferSizes(1, 8),
        supportsArithmetic = TransferSizes(4, 8),
        supportsLogical    = TransferSizes(4, 8))


@pytest.fixture
def managerPort(memory, device) -> TLManagerPortParameters:
    return TLManagerPortParameters([memory, device], beatBytes = 8)


@pytest.fixture
def clientPort(core) -> TLClientPortParameters:
    return TLClientPortParameters([core])


@pytest.fixture
def edgeOut(clientPort, managerPort) -> TLEdgeOut:
    return TLEdgeOut(clientPort, managerPort)


@pytest.fixture
def edgeIn(clientPort, managerPort) -> TLEdgeIn:
    return TLEdgeIn(clientPort, managerPort)
