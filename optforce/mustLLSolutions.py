#!/usr/bin/env python3
#
# Copyright 2022 Max Planck Insitute Magdeburg
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
#
#
"""Container for MustLL solutions (MustLLSolutions)"""

from typing import List, NamedTuple, Tuple
from optforce.names import *
import pickle


class MustLLPair(NamedTuple):
    """One MustLL set: the reactions chosen for slot 1 and slot 2"""
    idx1: int
    idx2: int
    rxn1: str
    rxn2: str


class MustLLSolutions(object):
    """Container for MustLL solutions

    Objects of this class are returned by find_must_ll. They hold the pairs of
    reactions in the order in which they were found, the status of the
    computation and information about the setup. Pairs can be accessed either
    as reaction identifiers or as reaction indices, each also in a flattened
    form that lists every reaction once, in the order of its first appearance.

    Instances of this class are not meant to be created by optforce users.

    Args:
        pairs (list of MustLLPair):
            The MustLL sets in the order of their discovery.

        status (str):
            Status string of the computation (e.g.: 'optimal')

        setup (dict):
            A dictionary containing information about the problem setup. This dict can/should contain
            the keys MODEL_ID, SOLVER, BIG_M, DUAL_BOUND, MIN_IMPROVEMENT, MAX_SOLUTIONS, T_LIMIT,
            CONSTR_OPT and EXCLUDED_RXNS

    Returns
        (MustLLSolutions):
        MustLL solutions
    """

    def __init__(self, pairs, status, setup):
        self.pairs = list(pairs)
        self.status = status
        self.setup = setup

    def get_num_sols(self) -> int:
        """Get number of solutions"""
        return len(self.pairs)

    def get_must_ll(self, i=None) -> List[Tuple[str, str]]:
        """Get i-th MustLL set or all of them as pairs of reaction identifiers"""
        return [(p.rxn1, p.rxn2) for p in get_subset(self.pairs, i)]

    def get_pos_must_ll(self, i=None) -> List[Tuple[int, int]]:
        """Get i-th MustLL set or all of them as pairs of reaction indices"""
        return [(p.idx1, p.idx2) for p in get_subset(self.pairs, i)]

    def get_must_ll_linear(self) -> List[str]:
        """Get all reaction identifiers that appear in a MustLL set"""
        return flatten_unique(self.get_must_ll())

    def get_pos_must_ll_linear(self) -> List[int]:
        """Get all reaction indices that appear in a MustLL set"""
        return flatten_unique(self.get_pos_must_ll())

    def save(self, filename):
        """Save MustLL solutions to a file."""
        with open(filename, 'wb') as f:
            pickle.dump(self, f)

    @classmethod
    def load(cls, filename):
        """Load MustLL solutions from a file."""
        with open(filename, 'rb') as f:
            cls = pickle.load(f)
        return cls


def get_subset(pairs, i):
    """MustLLSolutions internal function: getting a subset of solutions"""
    if i is None:
        return pairs
    if isinstance(i, int):
        i = [i]
    return [p for j, p in enumerate(pairs) if j in i]


def flatten_unique(pairs) -> List:
    """MustLLSolutions internal function: entries of all pairs, each once, in order of appearance"""
    seen = {}
    for p in pairs:
        for v in p:
            seen.setdefault(v, None)
    return list(seen)
