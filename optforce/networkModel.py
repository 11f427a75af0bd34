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
"""Network model adapter (NetworkModel)"""

from cobra.util import create_stoichiometric_matrix
from scipy import sparse
from numpy import isinf
from typing import Dict
from optforce.names import *
import logging


class NetworkModel(object):
    """Vector-matrix view on a metabolic network

    The network model holds the primitives that the MustLL problem is built from:
    reaction and metabolite identifiers, the stoichiometric matrix S (metabolites x
    reactions), the right hand side b of the mass balance S*v = b (usually zero),
    the objective vector c and the flux bounds lb <= v <= ub. Instances are not
    modified after construction.

    Example:
        net = NetworkModel.from_cobra(model)

    Args:
        reac_ids (list of str):
            Reaction identifiers (unique, ordered).

        met_ids (list of str):
            Metabolite identifiers (unique, ordered).

        S (sparse matrix):
            Stoichiometric matrix with len(met_ids) rows and len(reac_ids) columns.

        lb, ub (list of float):
            Flux bounds of all reactions.

        c (list of float): (Default: zeros)
            Objective coefficients of all reactions.

        b (list of float): (Default: zeros)
            Right hand side of the mass balance.

        model_id (str): (Default: None)
            Identifier of the network.

    Returns:
        (NetworkModel):

        A network model.
    """

    def __init__(self, reac_ids, met_ids, S, lb, ub, c=None, b=None, model_id=None):
        self.reac_ids = list(reac_ids)
        self.met_ids = list(met_ids)
        self.S = sparse.csr_matrix(S, dtype=float)
        self.lb = [float(v) for v in lb]
        self.ub = [float(v) for v in ub]
        self.c = [float(v) for v in c] if c is not None else [0.0] * len(self.reac_ids)
        self.b = [float(v) for v in b] if b is not None else [0.0] * len(self.met_ids)
        self.id = model_id
        self.check_consistency()

    @classmethod
    def from_cobra(cls, model) -> 'NetworkModel':
        """Build the network model from a cobra.Model"""
        return cls(reac_ids=model.reactions.list_attr('id'),
                   met_ids=model.metabolites.list_attr('id'),
                   S=create_stoichiometric_matrix(model, array_type='lil'),
                   lb=[r.lower_bound for r in model.reactions],
                   ub=[r.upper_bound for r in model.reactions],
                   c=[r.objective_coefficient for r in model.reactions],
                   model_id=model.id)

    @classmethod
    def from_dict(cls, record: Dict) -> 'NetworkModel':
        """Build the network model from a record

        The record needs the fields 'rxns', 'mets', 'S', 'b', 'c', 'lb' and 'ub'.
        An optional field 'id' names the network."""
        for field in ['rxns', 'mets', 'S', 'b', 'c', 'lb', 'ub']:
            if field not in record:
                raise Exception("Network model is missing the required field '" + field + "'.")
        return cls(reac_ids=record['rxns'],
                   met_ids=record['mets'],
                   S=record['S'],
                   lb=record['lb'],
                   ub=record['ub'],
                   c=record['c'],
                   b=record['b'],
                   model_id=record.get('id'))

    @property
    def num_reacs(self) -> int:
        return len(self.reac_ids)

    @property
    def num_mets(self) -> int:
        return len(self.met_ids)

    def check_consistency(self):
        """Raise if identifiers, matrix and vectors of the network do not fit together"""
        if len(set(self.reac_ids)) != len(self.reac_ids):
            raise Exception("Reaction identifiers 'rxns' must be unique.")
        if len(set(self.met_ids)) != len(self.met_ids):
            raise Exception("Metabolite identifiers 'mets' must be unique.")
        if self.S.shape[0] != self.num_mets:
            raise Exception("S has " + str(self.S.shape[0]) + " rows, but the model has " + str(self.num_mets) +
                            " metabolites ('mets').")
        if self.S.shape[1] != self.num_reacs:
            raise Exception("S has " + str(self.S.shape[1]) + " columns, but the model has " + str(self.num_reacs) +
                            " reactions ('rxns').")
        for name, vec, length in [('lb', self.lb, self.num_reacs), ('ub', self.ub, self.num_reacs),
                                  ('c', self.c, self.num_reacs), ('b', self.b, self.num_mets)]:
            if len(vec) != length:
                raise Exception("Field '" + name + "' must have " + str(length) + " elements, but has " + str(len(vec)) +
                                ".")
        for r, l, u in zip(self.reac_ids, self.lb, self.ub):
            if l > u:
                raise Exception("Lower bound of reaction " + r + " exceeds its upper bound.")

    def check_big_M(self, M, fixed_values=None):
        """Raise if M is too small to linearize the flux bounds of the network

        All flux bounds must be finite and M must be at least twice as large as the
        largest bound magnitude or fixed flux value.

        Args:
            M (float):
                The big-M constant.

            fixed_values (dict): (Default: None)
                Fixed flux values as {reaction index: value}.
        """
        if fixed_values is None:
            fixed_values = {}
        largest = 0.0
        largest_rxn = None
        for i, (r, l, u) in enumerate(zip(self.reac_ids, self.lb, self.ub)):
            if isinf(l) or isinf(u):
                raise Exception("Reaction " + r + " has an infinite flux bound. Flux bounds must be finite "
                                "to be linked with the big-M constant " + str(M) + ".")
            values = [abs(l), abs(u)]
            if i in fixed_values:
                values += [abs(fixed_values[i])]
            if max(values) > largest:
                largest = max(values)
                largest_rxn = r
        if M < 2 * largest:
            raise Exception("Big-M constant " + str(M) + " is smaller than twice the largest flux bound (" +
                            str(largest) + ", reaction " + largest_rxn + ").")
        logging.debug('  Big-M ' + str(M) + ' covers the largest flux bound ' + str(largest) + '.')
