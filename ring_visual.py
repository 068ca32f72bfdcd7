# ring_visual.py

import argparse
import logging

import matplotlib.pyplot as plt
import numpy as np

from config import WORKER_NODES, DISTRIBUTION_KEYS, LOG_LEVEL, RING_PLOT_PATH, setup_logger
from hashing_ring import HashRing, RING_SIZE, key_position

log = logging.getLogger(__name__)


def sample_keys(count=DISTRIBUTION_KEYS):
    return [f"key_{i}" for i in range(count)]


def show_ring_adj_list(ring):
    print("\n HASH RING (clockwise)\n")
    if not ring:
        print("  <empty>")
        return

    positions = ring.positions()
    for i, (h, node) in enumerate(positions):
        # arc from the predecessor up to this node, wrapping for the first
        arc = (h - positions[i - 1][0]) % RING_SIZE or RING_SIZE
        owned = arc / RING_SIZE * 100
        print(f"  {node!s:<20} -> {h:#018x} (owns {owned:5.1f}%)")
    print()


def key_distribution(ring, keys):
    distribution = {node: 0 for node in ring.nodes}
    for key in keys:
        node = ring.get_node(key)
        if node is not None:
            distribution[node] += 1
    return distribution


def distribution_stats(counts):
    """Summarise a node -> key count mapping.

    ``imbalance`` is the busiest node's load over the mean load; 1.0 is a
    perfectly even spread.
    """
    values = np.array(list(counts.values()), dtype=float)
    if values.size == 0:
        return {"nodes": 0, "keys": 0, "mean": 0.0, "std": 0.0, "min": 0, "max": 0, "imbalance": 0.0}

    mean = values.mean()
    return {
        "nodes": int(values.size),
        "keys": int(values.sum()),
        "mean": float(mean),
        "std": float(values.std()),
        "min": int(values.min()),
        "max": int(values.max()),
        "imbalance": float(values.max() / mean) if mean else 0.0,
    }


def _angle(h):
    return 2 * np.pi * h / RING_SIZE


def plot_ring(ring, keys=(), path=RING_PLOT_PATH):
    if not ring:
        raise ValueError("cannot plot an empty ring")

    fig, ax = plt.subplots(figsize=(8, 8))
    theta = np.linspace(0, 2 * np.pi, 512)
    ax.plot(np.cos(theta), np.sin(theta), color="lightgray", zorder=1)

    node_angles = np.array([_angle(h) for h, _ in ring.positions()])
    ax.scatter(np.cos(node_angles), np.sin(node_angles), s=120, color="tab:red", zorder=3, label="nodes")
    for angle, node in zip(node_angles, ring.nodes):
        ax.annotate(str(node), (1.12 * np.cos(angle), 1.12 * np.sin(angle)), ha="center", va="center")

    if keys:
        key_angles = np.array([_angle(key_position(k)) for k in keys])
        ax.scatter(np.cos(key_angles), np.sin(key_angles), s=8, color="tab:blue", alpha=0.5, zorder=2, label="keys")

    ax.set_aspect("equal")
    ax.set_xlim(-1.3, 1.3)
    ax.set_ylim(-1.3, 1.3)
    ax.axis("off")
    ax.legend(loc="upper right")
    ax.set_title(f"Hash ring: {len(ring)} nodes, {len(keys)} keys")

    fig.savefig(path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    log.info(f"Ring plot saved to {path}")
    return path


def main(argv=None):
    parser = argparse.ArgumentParser(description="Inspect a consistent hash ring.")
    parser.add_argument("--nodes", nargs="+", default=WORKER_NODES, help="Ring members")
    parser.add_argument("--keys", type=int, default=DISTRIBUTION_KEYS, help="Number of sample keys to place")
    parser.add_argument("--plot", metavar="PATH", help="Save a plot of the ring to PATH")
    parser.add_argument("--log-level", default=LOG_LEVEL, choices=["DEBUG", "INFO", "WARNING", "ERROR"])

    args = parser.parse_args(argv)
    if not args.nodes:
        parser.error("no ring nodes given; pass --nodes or set RING_NODES")
    setup_logger(level=args.log_level)

    ring = HashRing(args.nodes)
    log.info(f"Built ring with {len(ring)} of {len(args.nodes)} nodes")
    show_ring_adj_list(ring)

    keys = sample_keys(args.keys)
    counts = key_distribution(ring, keys)
    print(" Distribution Analysis:")
    for node, count in counts.items():
        pct = count / len(keys) * 100 if keys else 0.0
        print(f"  {node}: {count} keys ({pct:.1f}%)")

    stats = distribution_stats(counts)
    print(f"\n  mean={stats['mean']:.1f} std={stats['std']:.1f} imbalance={stats['imbalance']:.2f}")

    if args.plot:
        plot_ring(ring, keys, args.plot)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
