from __future__ import annotations
import logging
from dataclasses import dataclass, replace
from typing import Callable, Dict, Sequence

from diplomacy.Parameters import AddressSet, IdRange, RegionType, TransferSizes
from tilelink.Edges import TLEdgeIn, TLEdgeOut
from tilelink.Parameters import (TLClientParameters, TLClientPortParameters, TLManagerParameters,
                                 TLManagerPortParameters)


logger = logging.getLogger(__name__)


DEFAULT_BEAT_BYTES = 8
CACHE_BLOCK_BYTES  = 64


@dataclass(frozen=True)
class TLTopology:
    """One link's static description: the clients, the managers and the beat width.

    Built once, never mutated; every port and edge of the link is derived from it.
    """
    clients:   Sequence[TLClientParameters]  = ()
    managers:  Sequence[TLManagerParameters] = ()
    beatBytes: int = DEFAULT_BEAT_BYTES

    def __post_init__(self):
        object.__setattr__(self, "clients", tuple(self.clients))
        object.__setattr__(self, "managers", tuple(self.managers))

    def copy(self, **kwargs) -> TLTopology:
        return replace(self, **kwargs)

    def manager(self, name: str) -> TLManagerParameters:
        found = [m for m in self.managers if m.name == name]
        assert found, f"No manager named '{name}' in this topology"
        return found[0]

    def clientPort(self) -> TLClientPortParameters:
        return TLClientPortParameters(self.clients)

    def managerPort(self) -> TLManagerPortParameters:
        return TLManagerPortParameters(self.managers, self.beatBytes)

    def edgeOut(self) -> TLEdgeOut:
        return TLEdgeOut(self.clientPort(), self.managerPort())

    def edgeIn(self) -> TLEdgeIn:
        return TLEdgeIn(self.clientPort(), self.managerPort())


def BaseConfig(t: TLTopology) -> TLTopology:
    core = TLClientParameters(
        name               = "core",
        sourceId           = IdRange(0, 4),
        supportsGet        = TransferSizes(1, CACHE_BLOCK_BYTES),
        supportsPutFull    = TransferSizes(1, CACHE_BLOCK_BYTES),
        supportsPutPartial = TransferSizes(1, CACHE_BLOCK_BYTES),
        supportsHint       = True)
    memory = TLManagerParameters(
        name               = "memory",
        address            = [AddressSet(0x0fffffff, 0x80000000)],
        sinkId             = IdRange(0, 1),
        regionType         = RegionType.UNCACHED,
        supportsArithmetic = TransferSizes(4, DEFAULT_BEAT_BYTES),
        supportsLogical    = TransferSizes(4, DEFAULT_BEAT_BYTES),
        supportsGet        = TransferSizes(1, CACHE_BLOCK_BYTES),
        supportsPutFull    = TransferSizes(1, CACHE_BLOCK_BYTES),
        supportsPutPartial = TransferSizes(1, CACHE_BLOCK_BYTES),
        supportsHint       = True,
        fifoId             = 0)
    return t.copy(clients = [core], managers = [memory], beatBytes = DEFAULT_BEAT_BYTES)


def WithCoherentMemory(t: TLTopology) -> TLTopology:
    block = TransferSizes(CACHE_BLOCK_BYTES)
    memory = t.manager("memory").copy(regionType = RegionType.TRACKED, supportsAcquire = block)
    return t.copy(
        clients  = [c.copy(supportsProbe = block) for c in t.clients],
        managers = [memory if m.name == "memory" else m for m in t.managers])


def WithMMIO(t: TLTopology) -> TLTopology:
    nextSink = max((m.sinkId.end for m in t.managers), default = 0)
    mmio = TLManagerParameters(
        name               = "mmio",
        address            = [AddressSet(0xffff, 0x10000000)],
        sinkId             = IdRange(nextSink, nextSink + 1),
        regionType         = RegionType.UNCACHEABLE,
        supportsGet        = TransferSizes(1, DEFAULT_BEAT_BYTES),
        supportsPutFull    = TransferSizes(1, DEFAULT_BEAT_BYTES),
        supportsPutPartial = TransferSizes(1, DEFAULT_BEAT_BYTES),
        fifoId             = 1)
    return t.copy(managers = list(t.managers) + [mmio])


def WithWideBus(t: TLTopology) -> TLTopology:
    return t.copy(beatBytes = 16)


CONFIGS: Dict[str, Callable[[TLTopology], TLTopology]] = {
    "BaseConfig":         BaseConfig,
    "WithCoherentMemory": WithCoherentMemory,
    "WithMMIO":           WithMMIO,
    "WithWideBus":        WithWideBus,
}


# Parts are separated by '_'; the rightmost part is applied first
def getConfig(configs: str) -> TLTopology:
    topology = TLTopology()
    for name in reversed(configs.split("_")):
        try:
            part = CONFIGS[name]
        except KeyError as e:
            raise ValueError(f'Unable to find part "{name}" from "{configs}", did you misspell it?') from e
        topology = part(topology)
    logger.debug("Config %s: %d clients, %d managers, beatBytes = %d",
                 configs, len(topology.clients), len(topology.managers), topology.beatBytes)
    return topology
