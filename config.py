# config.py

import logging
import os

# Sample membership used by the inspection tool and the distribution checks
WORKER_NODES = [n for n in os.getenv("RING_NODES", "node1,node2,node3,node4").split(",") if n]

DISTRIBUTION_KEYS = int(os.getenv("DISTRIBUTION_KEYS", 1000))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
RING_PLOT_PATH = os.getenv("RING_PLOT_PATH", "ring.png")


def setup_logger(name=None, level=LOG_LEVEL):
    logger = logging.getLogger(name)
    logger.setLevel(level)

    handler = logging.StreamHandler()
    formatter = logging.Formatter("[%(asctime)s] [%(levelname)s] %(message)s")
    handler.setFormatter(formatter)

    if not logger.hasHandlers():
        logger.addHandler(handler)

    return logger
