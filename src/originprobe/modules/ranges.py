"""CIDR range parsing and lazy address expansion."""

import bisect
import ipaddress
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from ipaddress import IPv4Address, IPv4Network

from .errors import InvalidRange

logger = logging.getLogger(__name__)


def parse_range(text: str) -> IPv4Network:
    """Parse one CIDR string strictly.

    A bare address is a /32. Host bits set beyond the prefix
    (``10.0.0.1/24``) are rejected rather than silently masked.
    """
    candidate = text.strip() if isinstance(text, str) else ""
    if not candidate:
        raise InvalidRange(text, "empty range")
    try:
        network = ipaddress.ip_network(candidate, strict=True)
    except ValueError as exc:
        message = str(exc)
        if "has host bits set" in message:
            raise InvalidRange(text, "address has host bits set beyond the prefix") from exc
        raise InvalidRange(text, message) from exc
    if not isinstance(network, IPv4Network):
        raise InvalidRange(text, "only IPv4 ranges are supported")
    return network


@dataclass
class _Block:
    network: IPv4Network
    # Earlier blocks nested inside this one, disjoint and sorted.
    skip: list[IPv4Network] = field(default_factory=list)

    @property
    def size(self) -> int:
        return self.network.num_addresses - sum(net.num_addresses for net in self.skip)

    def addresses(self) -> Iterator[IPv4Address]:
        cursor = int(self.network.network_address)
        last = int(self.network.broadcast_address)
        for hole in self.skip:
            hole_start = int(hole.network_address)
            for value in range(cursor, hole_start):
                yield IPv4Address(value)
            cursor = int(hole.broadcast_address) + 1
        for value in range(cursor, last + 1):
            yield IPv4Address(value)


class RangeExpander:
    """Ordered, deduplicated, lazily expanded view over CIDR ranges.

    Every range is parsed up front, so a malformed entry raises
    InvalidRange before a single address is produced. Ranges expand in the
    order supplied and addresses within a range ascend. CIDR blocks either
    nest or are disjoint: a block already covered by an earlier one is
    dropped, and a block that covers earlier ones skips them.

    Iterating again restarts the sequence from the first address.
    """

    def __init__(self, ranges: Iterable[str]):
        self.ranges = list(ranges)
        self._blocks: list[_Block] = []
        # Union of everything accepted so far as disjoint maximal networks,
        # sorted by start address; _starts mirrors it for bisect.
        self._covered: list[IPv4Network] = []
        self._starts: list[int] = []
        for text in self.ranges:
            self._add(text, parse_range(text))

    def _add(self, text: str, network: IPv4Network) -> None:
        start = int(network.network_address)
        end = int(network.broadcast_address)

        # CIDR blocks nest or are disjoint, so only the covered network
        # starting at or before ``start`` can contain this one.
        pos = bisect.bisect_right(self._starts, start) - 1
        if pos >= 0 and int(self._covered[pos].broadcast_address) >= end:
            logger.debug("Skipping %s: already covered by %s", text, self._covered[pos])
            return

        lo = bisect.bisect_left(self._starts, start)
        hi = bisect.bisect_right(self._starts, end)
        skip = self._covered[lo:hi]
        if skip:
            logger.debug("Range %s overlaps %d earlier range(s); skipping them", text, len(skip))
        self._covered[lo:hi] = [network]
        self._starts[lo:hi] = [start]
        self._blocks.append(_Block(network=network, skip=skip))

    @property
    def networks(self) -> list[IPv4Network]:
        return [block.network for block in self._blocks]

    @property
    def total(self) -> int:
        """Number of distinct addresses the expansion yields."""
        return sum(block.size for block in self._blocks)

    def __len__(self) -> int:
        return self.total

    def __iter__(self) -> Iterator[IPv4Address]:
        for block in self._blocks:
            yield from block.addresses()


def expand_ranges(ranges: Iterable[str]) -> Iterator[IPv4Address]:
    """Parse ``ranges`` eagerly and return a lazy address iterator."""
    return iter(RangeExpander(ranges))
