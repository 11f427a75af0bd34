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
"""Single-level MILP for the bilevel MustLL problem (MustLLProblem)"""

from scipy import sparse
from numpy import inf
from typing import List, Tuple
from optforce import MILP_LP
from optforce.networkModel import NetworkModel
from optforce.reactionPartition import ReactionPartition
from optforce.names import *
import logging

# names of the variable blocks of the MustLL MILP
FLUX = 'v'
SLOT_1 = 'y1'
SLOT_2 = 'y2'
MU = 'mu'
WITNESS_1 = 'w1'
WITNESS_2 = 'w2'
DELTA_M = 'deltam'
DELTA_P = 'deltap'
LAMBDA = 'lambda'
Z_PRIMAL = 'zprimal'
Z_DUAL = 'zdual'
Z = 'z'


class VariableMap(object):
    """Column layout of a MILP

    Maps each named block of variables to its range of columns, so that solution
    vectors can be read by name instead of by offset.

    Example:
        vmap = VariableMap([('v', 3), ('y1', 3), ('z', 1)])
        vmap.col('y1', 2)  # 5

    Args:
        blocks (list of (str, int)):
            Names and lengths of the variable blocks, in column order.
    """

    def __init__(self, blocks):
        self.ranges = {}
        start = 0
        for name, length in blocks:
            if name in self.ranges:
                raise Exception("Variable block " + name + " is defined twice.")
            self.ranges[name] = range(start, start + length)
            start += length
        self.num_vars = start

    def __getitem__(self, name) -> range:
        return self.ranges[name]

    def col(self, name, i=0) -> int:
        """Column of the i-th variable of a block"""
        return self.ranges[name][i]

    def values(self, x, name) -> List:
        """Entries of a solution vector that belong to a block"""
        return [x[j] for j in self.ranges[name]]


def _sparse_rows(entries, numrows, numvars) -> sparse.csr_matrix:
    """Sparse matrix from (row, column, coefficient) triplets"""
    if not entries:
        return sparse.csr_matrix((numrows, numvars))
    rows, cols, data = zip(*entries)
    return sparse.csr_matrix((data, (rows, cols)), shape=(numrows, numvars))


class MustLLProblem(object):
    """The MustLL problem as a single-level MILP

    The bilevel problem
        maximize    sum_j (y1_j + y2_j) * (min_wt_j - v_j)
        subject to  sum_j y1_j = 1,  sum_j y2_j = 1,  y1_j + y2_j <= 1,
                    v = argmax { sum_j (y1_j + y2_j) * v_j : S*v = b, v_fixed = values, lb <= v_free <= ub }
    picks two reactions (slot 1 and slot 2) whose combined flux stays below their
    combined wild-type minimum even when the network maximizes it. The inner LP is
    replaced by its primal constraints, its dual constraints and the equality of
    primal and dual objective.
    The products y*v of the inner objective are carried by the witness variables w,
    which are linked to y and v through big-M constraints. Previously found pairs
    are excluded with cuts in both slot orders.

    The cut-independent constraint blocks are built once on construction, and
    build_milp adds the cuts and returns a new MILP each time it is called.

    Example:
        problem = MustLLProblem(net, partition, min_fluxes_wt, M=2000, dual_bound=1000)
        milp = problem.build_milp(pairs=[(1, 2)], solver='glpk')

    Args:
        net (NetworkModel):
            The metabolic network.

        partition (ReactionPartition):
            Fixed, free, selectable and excluded reactions of the network.

        min_fluxes_wt (list of float):
            Wild-type minimum fluxes, parallel to the reactions of the network.

        M (float): (Default: 2000)
            Big-M constant. Must be at least twice the largest flux bound.

        dual_bound (float): (Default: 1000)
            Bound on the magnitude of the dual variables.

        min_improvement (float): (Default: 0.1)
            Lower bound of the outer objective value.

    Returns:
        (MustLLProblem):

        The MustLL problem.
    """

    def __init__(self,
                 net: NetworkModel,
                 partition: ReactionPartition,
                 min_fluxes_wt,
                 M=2000.0,
                 dual_bound=1000.0,
                 min_improvement=0.1):
        self.net = net
        self.partition = partition
        self.min_fluxes_wt = [float(v) for v in min_fluxes_wt]
        self.M = float(M)
        self.dual_bound = float(dual_bound)
        self.min_improvement = float(min_improvement)
        if len(self.min_fluxes_wt) != net.num_reacs:
            raise Exception("Wild-type minimum fluxes must have one entry per reaction (" + str(net.num_reacs) + ").")
        numr = net.num_reacs
        self.vmap = VariableMap([(FLUX, numr), (SLOT_1, numr), (SLOT_2, numr), (MU, numr), (WITNESS_1, numr),
                                 (WITNESS_2, numr), (DELTA_M, numr), (DELTA_P, numr), (LAMBDA, net.num_mets),
                                 (Z_PRIMAL, 1), (Z_DUAL, 1), (Z, 1)])
        self.numvars = self.vmap.num_vars
        self.lb, self.ub, self.vtype = self.build_bounds()
        self.c = [0.0] * self.numvars
        self.c[self.vmap.col(Z)] = 1.0

        blocks = [self.build_primal_block(), self.build_dual_block(), self.build_big_m_block(), self.build_outer_block()]
        self.A_base = sparse.vstack([blk[0] for blk in blocks]).tocsr()
        self.b_base = [v for blk in blocks for v in blk[1]]
        self.csense_base = ''.join(blk[2] for blk in blocks)
        logging.info('  MustLL MILP: ' + str(self.A_base.shape[0]) + ' constraints, ' + str(self.numvars) +
                     ' variables, ' + str(self.vtype.count(BINARY)) + ' binaries, ' +
                     str(len(partition.idx_selectable)) + ' selectable reactions.')

    def build_bounds(self) -> Tuple[List, List, str]:
        """Variable bounds and types of the MILP"""
        p = self.partition
        numr = self.net.num_reacs
        sel = set(p.idx_selectable)
        fixed = set(p.idx_fixed)
        db = self.dual_bound
        lb = list(self.net.lb)
        ub = list(self.net.ub)
        # y1, y2
        lb += [0.0] * 2 * numr
        ub += [1.0 if j in sel else 0.0 for j in range(numr)] * 2
        # mu
        lb += [-db if j in fixed else 0.0 for j in range(numr)]
        ub += [db if j in fixed else 0.0 for j in range(numr)]
        # w1, w2
        lb += [-self.M if j in sel else 0.0 for j in range(numr)] * 2
        ub += [self.M if j in sel else 0.0 for j in range(numr)] * 2
        # delta-, delta+
        lb += [0.0] * 2 * numr
        ub += [0.0 if j in fixed else db for j in range(numr)] * 2
        # lambda
        lb += [-db] * self.net.num_mets
        ub += [db] * self.net.num_mets
        # zprimal, zdual, z
        lb += [-inf] * 3
        ub += [inf] * 3
        vtype = CONTINUOUS * numr + BINARY * 2 * numr + CONTINUOUS * (5 * numr + self.net.num_mets + 3)
        return lb, ub, vtype

    def build_primal_block(self) -> Tuple[sparse.csr_matrix, List, str]:
        """Primal feasibility of the inner LP

        S*v = b, v_fixed = values, -v_free >= -ub_free, v_free >= lb_free and
        zprimal = -sum_selectable (w1 + w2)."""
        net, p, vmap = self.net, self.partition, self.vmap
        entries = []
        b = []
        csense = ''
        S = net.S.tocoo()
        for i, j, a in zip(S.row, S.col, S.data):
            entries += [(i, vmap.col(FLUX, j), a)]
        b += net.b
        csense += EQUAL * net.num_mets
        row = net.num_mets
        for j, value in zip(p.idx_fixed, p.fixed_values):
            entries += [(row, vmap.col(FLUX, j), 1.0)]
            b += [value]
            csense += EQUAL
            row += 1
        for j in p.idx_free:
            entries += [(row, vmap.col(FLUX, j), -1.0)]
            b += [-net.ub[j]]
            csense += GREATER_EQUAL
            row += 1
        for j in p.idx_free:
            entries += [(row, vmap.col(FLUX, j), 1.0)]
            b += [net.lb[j]]
            csense += GREATER_EQUAL
            row += 1
        entries += [(row, vmap.col(Z_PRIMAL), 1.0)]
        for j in p.idx_selectable:
            entries += [(row, vmap.col(WITNESS_1, j), 1.0), (row, vmap.col(WITNESS_2, j), 1.0)]
        b += [0.0]
        csense += EQUAL
        row += 1
        return _sparse_rows(entries, row, self.numvars), b, csense

    def build_dual_block(self) -> Tuple[sparse.csr_matrix, List, str]:
        """Dual feasibility of the inner LP

        One stationarity row per reaction:
            fixed:            S_j'*lambda + mu_j = 0
            selectable:       S_j'*lambda + deltam_j - deltap_j + y1_j + y2_j = 0
            other free:       S_j'*lambda + deltam_j - deltap_j = 0
        and the dual objective
            zdual = b'*lambda + values'*mu_fixed + lb_free'*deltam_free - ub_free'*deltap_free
        """
        net, p, vmap = self.net, self.partition, self.vmap
        fixed = set(p.idx_fixed)
        sel = set(p.idx_selectable)
        entries = []
        S = net.S.tocoo()
        for i, j, a in zip(S.row, S.col, S.data):
            entries += [(j, vmap.col(LAMBDA, i), a)]
        for j in range(net.num_reacs):
            if j in fixed:
                entries += [(j, vmap.col(MU, j), 1.0)]
                continue
            entries += [(j, vmap.col(DELTA_M, j), 1.0), (j, vmap.col(DELTA_P, j), -1.0)]
            if j in sel:
                entries += [(j, vmap.col(SLOT_1, j), 1.0), (j, vmap.col(SLOT_2, j), 1.0)]
        row = net.num_reacs
        entries += [(row, vmap.col(Z_DUAL), 1.0)]
        entries += [(row, vmap.col(LAMBDA, i), -net.b[i]) for i in range(net.num_mets) if net.b[i] != 0]
        entries += [(row, vmap.col(MU, j), -value) for j, value in zip(p.idx_fixed, p.fixed_values) if value != 0]
        entries += [(row, vmap.col(DELTA_M, j), -net.lb[j]) for j in p.idx_free if net.lb[j] != 0]
        entries += [(row, vmap.col(DELTA_P, j), net.ub[j]) for j in p.idx_free if net.ub[j] != 0]
        row += 1
        return _sparse_rows(entries, row, self.numvars), [0.0] * row, EQUAL * row

    def build_big_m_block(self) -> Tuple[sparse.csr_matrix, List, str]:
        """Link the witness variables to the fluxes of the selected reactions

        For every selectable reaction j and each slot s, w_s = v_j if y_s = 1 and
        w_s = 0 if y_s = 0:
            w_s - v_j + M*y_s <= M,   w_s - v_j - M*y_s >= -M,
            w_s - M*y_s <= 0,         w_s + M*y_s >= 0
        and no reaction takes both slots: y1_j + y2_j <= 1."""
        vmap, M = self.vmap, self.M
        entries = []
        b = []
        csense = ''
        row = 0
        for j in self.partition.idx_selectable:
            v = vmap.col(FLUX, j)
            for w_blk, y_blk in [(WITNESS_1, SLOT_1), (WITNESS_2, SLOT_2)]:
                w = vmap.col(w_blk, j)
                y = vmap.col(y_blk, j)
                entries += [(row, w, 1.0), (row, v, -1.0), (row, y, M)]
                entries += [(row + 1, w, 1.0), (row + 1, v, -1.0), (row + 1, y, -M)]
                entries += [(row + 2, w, 1.0), (row + 2, y, -M)]
                entries += [(row + 3, w, 1.0), (row + 3, y, M)]
                b += [M, -M, 0.0, 0.0]
                csense += LESS_EQUAL + GREATER_EQUAL + LESS_EQUAL + GREATER_EQUAL
                row += 4
            entries += [(row, vmap.col(SLOT_1, j), 1.0), (row, vmap.col(SLOT_2, j), 1.0)]
            b += [1.0]
            csense += LESS_EQUAL
            row += 1
        return _sparse_rows(entries, row, self.numvars), b, csense

    def build_outer_block(self) -> Tuple[sparse.csr_matrix, List, str]:
        """Selection logic and objective of the outer problem

        z = sum_selectable (min_wt*(y1 + y2) - w1 - w2), zprimal = zdual, no fixed
        or excluded reaction in either slot, exactly one selectable reaction per
        slot and z >= min_improvement."""
        p, vmap = self.partition, self.vmap
        entries = []
        b = []
        csense = ''
        row = 0
        entries += [(row, vmap.col(Z), 1.0)]
        for j in p.idx_selectable:
            entries += [(row, vmap.col(WITNESS_1, j), 1.0), (row, vmap.col(WITNESS_2, j), 1.0)]
            if self.min_fluxes_wt[j] != 0:
                entries += [(row, vmap.col(SLOT_1, j), -self.min_fluxes_wt[j]),
                            (row, vmap.col(SLOT_2, j), -self.min_fluxes_wt[j])]
        b += [0.0]
        csense += EQUAL
        row += 1
        entries += [(row, vmap.col(Z_PRIMAL), 1.0), (row, vmap.col(Z_DUAL), -1.0)]
        b += [0.0]
        csense += EQUAL
        row += 1
        for idx, rhs in [(p.idx_fixed, 0.0), (p.idx_excluded, 0.0), (p.idx_selectable, 1.0)]:
            if not idx:
                continue
            for y_blk in [SLOT_1, SLOT_2]:
                entries += [(row, vmap.col(y_blk, j), 1.0) for j in idx]
                b += [rhs]
                csense += EQUAL
                row += 1
        entries += [(row, vmap.col(Z), 1.0)]
        b += [self.min_improvement]
        csense += GREATER_EQUAL
        row += 1
        return _sparse_rows(entries, row, self.numvars), b, csense

    def exclusion_cuts(self, pairs) -> Tuple[sparse.csr_matrix, List, str]:
        """Cuts that forbid previously found pairs in both slot orders

        For each pair (a, b): y1_a + y2_b <= 1 and y1_b + y2_a <= 1."""
        vmap = self.vmap
        entries = []
        row = 0
        for pair in pairs:
            a, b = pair[0], pair[1]
            entries += [(row, vmap.col(SLOT_1, a), 1.0), (row, vmap.col(SLOT_2, b), 1.0)]
            entries += [(row + 1, vmap.col(SLOT_1, b), 1.0), (row + 1, vmap.col(SLOT_2, a), 1.0)]
            row += 2
        return _sparse_rows(entries, row, self.numvars), [1.0] * row, LESS_EQUAL * row

    def build_milp(self, pairs=None, solver=None, tlim=None, seed=None) -> MILP_LP:
        """Construct a new MILP that excludes the given pairs

        Args:
            pairs (list of (int, int)): (Default: None)
                Index pairs of previously found MustLL sets.

            solver (str): (Default: None)
                Solver backend.

            tlim (float): (Default: None)
                Time limit of the solver in seconds.

            seed (int): (Default: None)
                Seed for the solver.

        Returns:
            (MILP_LP):

            A MILP that maximizes z.
        """
        if pairs is None:
            pairs = []
        A_cut, b_cut, csense_cut = self.exclusion_cuts(pairs)
        return MILP_LP(c=self.c,
                       A=sparse.vstack((self.A_base, A_cut)).tocsr(),
                       b=self.b_base + b_cut,
                       csense=self.csense_base + csense_cut,
                       lb=self.lb,
                       ub=self.ub,
                       vtype=self.vtype,
                       osense=MAXIMIZE,
                       solver=solver,
                       tlim=tlim,
                       seed=seed)

    def extract_pair(self, x) -> Tuple[int, int]:
        """Reaction indices in slot 1 and slot 2 of a solution vector"""
        slots = []
        for y_blk in [SLOT_1, SLOT_2]:
            y = self.vmap.values(x, y_blk)
            active = [j for j in self.partition.idx_selectable if y[j] > 0.5]
            if len(active) != 1:
                raise Exception("Solution selects " + str(len(active)) + " reactions for slot " + y_blk +
                                " instead of exactly one.")
            slots += active
        return slots[0], slots[1]
