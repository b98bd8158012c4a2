import logging

import pytest

from dendromatch.dendrogram import Dendrogram, load_dendrogram


def pytest_configure(config):
    """Set up test environment before tests run."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


# 'A':0.5,('B':0.3,'C':0.3):0.2
SCENARIO_A = "'A':0.5,('B':0.3,'C':0.3):0.2"

# Ultrametric five-leaf tree, root distance 1.0
#
#   r (1.0)
#   |-- r0 (0.6) ---- D, E
#   |-- r1 (0.6) --+-- r10 (0.3) ---- B, C
#                  |-- A
FIVE_LEAVES = (
    "(('D':0.6,'E':0.6):0.4,"
    "(('B':0.3,'C':0.3):0.3,'A':0.6):0.4);"
)


@pytest.fixture
def scenario_a() -> Dendrogram:
    return load_dendrogram(SCENARIO_A, "scenario_a")


@pytest.fixture
def five_leaves() -> Dendrogram:
    return load_dendrogram(FIVE_LEAVES, "five_leaves")
