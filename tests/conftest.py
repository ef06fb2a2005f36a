"""
Shared fixtures for the partial order graph tests.

Provides common fixtures for:
- Small aligned sequence sets and the graphs built from them
- Indel inference records of a single ancestor
"""

import matplotlib

matplotlib.use('Agg')

import pytest

from pogkit.pog.construction import Inference, from_alignment


@pytest.fixture
def ac_alignment():
    """ Three sequences of two columns, the second column disagrees. """
    return [("s1", "AC"), ("s2", "AG"), ("s3", "AC")]


@pytest.fixture
def ac_pog(ac_alignment):
    return from_alignment(ac_alignment)


@pytest.fixture
def gapped_alignment():
    """ Column 1 is used by s2 only, column 2 by s1 and s3. """
    return [("s1", "A-CD"), ("s2", "AB-D"), ("s3", "A-CD")]


@pytest.fixture
def gapped_pog(gapped_alignment):
    return from_alignment(gapped_alignment)


@pytest.fixture
def branch_alignment():
    """ s1 takes 0 -> 1 -> 2, s2 takes 0 -> 3, so node 2 is reached through node 1 only. """
    return [("s1", "ABC-"), ("s2", "A--D")]


@pytest.fixture
def branch_pog(branch_alignment):
    return from_alignment(branch_alignment)


@pytest.fixture
def ancestor_records():
    """ Four positions (end id 3), every transition listed by both endpoints. """
    return [Inference(-1, None, [0]),
            Inference(0, 'M', [-1, 1, 2]),
            Inference(1, 'K', [0, 2]),
            Inference(2, 'L', [0, 1, 3]),
            Inference(3, None, [2]),
            ]
