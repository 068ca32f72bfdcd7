import os

os.environ.setdefault("MPLBACKEND", "Agg")

import pytest

import hashing_ring


@pytest.fixture
def pinned(monkeypatch):
    """Pin ring positions: values listed in the returned dict hash to their mapped position."""
    positions = {}
    real = hashing_ring.key_position

    def fake(value):
        if value in positions:
            return positions[value]
        return real(value)

    monkeypatch.setattr(hashing_ring, "key_position", fake)
    return positions
