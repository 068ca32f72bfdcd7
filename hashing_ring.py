# hashing_ring.py

import bisect
import hashlib
import logging
import math
import numbers
import threading
from fractions import Fraction

log = logging.getLogger(__name__)

RING_BITS = 64
RING_SIZE = 2 ** RING_BITS


def _frame(part):
    return str(len(part)).encode() + b":" + part


def _encode_number(value):
    if isinstance(value, complex):
        if value.imag:
            return b"c" + _frame(_encode_number(value.real)) + _frame(_encode_number(value.imag))
        value = value.real
    if not isinstance(value, numbers.Rational) and not math.isfinite(value):
        # nan, inf and -inf have no exact rational form
        return b"f" + repr(float(value)).encode()

    # equal numbers share one exact rational form: 1 == 1.0 == True == Decimal("1")
    q = Fraction(value)
    if q.denominator == 1:
        return b"i" + str(q.numerator).encode()
    return b"q" + f"{q.numerator}/{q.denominator}".encode()


def _encode(value):
    """Canonical, type-tagged bytes for a value.

    Values that compare equal encode identically and values of different
    kinds never share an encoding.
    """
    if value is None:
        return b"n"
    if isinstance(value, str):
        return b"s" + value.encode("utf-8")
    if isinstance(value, bytes):
        return b"b" + value
    if isinstance(value, numbers.Number):
        return _encode_number(value)
    if isinstance(value, tuple):
        return b"t" + _frame(str(len(value)).encode()) + b"".join(_frame(_encode(v)) for v in value)
    if isinstance(value, frozenset):
        return b"e" + _frame(str(len(value)).encode()) + b"".join(_frame(e) for e in sorted(_encode(v) for v in value))
    raise TypeError(f"cannot place {type(value).__name__!r} on the ring")


def key_position(value):
    """Map a hashable value to its 64-bit position on the ring.

    Supported values are None, str, bytes, numbers, and tuples or frozensets
    of those. MD5 over the canonical encoding, first 8 digest bytes
    big-endian. A new md5 object is built per call so concurrent callers
    never share state.
    """
    hash(value)  # TypeError for unhashable values, same as a dict key
    digest = hashlib.md5(_encode(value)).digest()
    return int.from_bytes(digest[:RING_BITS // 8], "big")


class HashRing:
    """Consistent hash ring mapping keys to their clockwise successor node.

    Not synchronised: callers sharing one ring across threads need their own
    lock, or a LockedHashRing.
    """

    def __init__(self, nodes=None):
        self.ring = {}
        self.sorted_keys = []

        for node in nodes or []:
            self.add_node(node)

    def _successor(self, h):
        idx = bisect.bisect_left(self.sorted_keys, h)
        if idx == len(self.sorted_keys):
            idx = 0
        return idx

    def add_node(self, node):
        h = key_position(node)
        if h in self.ring:
            # collision or re-add: last writer owns the position
            log.debug(f"Position {h:#018x} overwritten: {self.ring[h]!r} -> {node!r}")
        else:
            bisect.insort(self.sorted_keys, h)
        self.ring[h] = node

    def remove_node(self, node, exact=False):
        """Remove the node at the clockwise successor of ``node``'s position.

        The entry removed is whichever node owns that position, which is not
        necessarily ``node`` itself. With ``exact=True`` only an entry sitting
        at exactly ``node``'s position is removed.
        """
        if not self.sorted_keys:
            return

        h = key_position(node)
        if exact:
            if h not in self.ring:
                return
            idx = bisect.bisect_left(self.sorted_keys, h)
        else:
            idx = self._successor(h)

        removed = self.sorted_keys.pop(idx)
        evicted = self.ring.pop(removed)
        log.debug(f"Removed {evicted!r} at {removed:#018x}")

    def get_node(self, key):
        if not self.sorted_keys:
            return None
        h = key_position(key)
        return self.ring[self.sorted_keys[self._successor(h)]]

    def get_replicas(self, key, count=2):
        if not self.sorted_keys or count <= 0:
            return []

        idx = self._successor(key_position(key))
        replicas = []
        for step in range(len(self.sorted_keys)):
            node = self.ring[self.sorted_keys[(idx + step) % len(self.sorted_keys)]]
            if node not in replicas:
                replicas.append(node)
            if len(replicas) == count:
                break
        return replicas

    @property
    def nodes(self):
        return [self.ring[h] for h in self.sorted_keys]

    def positions(self):
        return [(h, self.ring[h]) for h in self.sorted_keys]

    def __len__(self):
        return len(self.sorted_keys)

    def __iter__(self):
        return iter(self.nodes)

    def __contains__(self, node):
        h = key_position(node)
        return h in self.ring and self.ring[h] == node

    def __repr__(self):
        return f"{type(self).__name__}({len(self)} nodes)"


class LockedHashRing(HashRing):
    """HashRing whose operations are serialised by a single re-entrant lock."""

    def __init__(self, nodes=None):
        self._lock = threading.RLock()
        super().__init__(nodes)

    def add_node(self, node):
        with self._lock:
            super().add_node(node)

    def remove_node(self, node, exact=False):
        with self._lock:
            super().remove_node(node, exact=exact)

    def get_node(self, key):
        with self._lock:
            return super().get_node(key)

    def get_replicas(self, key, count=2):
        with self._lock:
            return super().get_replicas(key, count)

    @property
    def nodes(self):
        with self._lock:
            return super().nodes

    def positions(self):
        with self._lock:
            return super().positions()

    def __len__(self):
        with self._lock:
            return len(self.sorted_keys)

    def __contains__(self, node):
        with self._lock:
            return super().__contains__(node)
