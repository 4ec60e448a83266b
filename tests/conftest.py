import sys
import os
import pytest

# project root on sys.path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from zkmint.groth16.proving import prove
from zkmint.groth16.setup import setup
from zkmint.groth16.verifying import prepare


# ── test constants ──
SECRET = 12345
WRONG_COMMITMENT = 99999

SEED_A = "zkmint-test-a"
SEED_B = "zkmint-test-b"


@pytest.fixture(scope="session")
def key_pair():
    """(pk, vk) from a deterministic setup."""
    return setup(seed=SEED_A)


@pytest.fixture(scope="session")
def other_key_pair():
    """Key pair for the same circuit from an unrelated setup."""
    return setup(seed=SEED_B)


@pytest.fixture(scope="session")
def pvk(key_pair):
    return prepare(key_pair[1])


@pytest.fixture(scope="session")
def honest_proof(key_pair):
    """(proof, commitment) for SECRET under key_pair."""
    pk, _ = key_pair
    return prove(pk, SECRET)
