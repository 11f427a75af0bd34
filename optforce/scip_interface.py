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
"""SCIP solver interface for LP and MILP"""

from numpy import nan, inf, isinf, nonzero, random
import pyscipopt as pso
from optforce.names import *
from typing import Tuple, List
import logging


class SCIP_MILP_LP(pso.Model):
    """SCIP interface for MILP and LP

    This class is a wrapper for the SCIP-Python API (pyscipopt) that offers the
    construction and solution of MILPs and LPs in a vector-matrix-based manner,
    with the same bindings as the other solver interfaces of the optforce package.

    Example:
        scip = SCIP_MILP_LP(c, A, b, csense, lb, ub, vtype, osense, seed)

    Args:
        c (list of float):
            The objective vector.

        A (sparse.csr_matrix):
            Coefficient matrix of all constraint rows.

        b (list of float):
            The right hand sides of all constraint rows.

        csense (str):
            Relational sense of each row: 'E', 'L' or 'G'.

        lb, ub (list of float):
            The variable bounds.

        vtype (str):
            A character string that specifies the type of each variable:
            'C'ontinous, 'B'inary or 'I'nteger

        osense (str):
            MAXIMIZE or MINIMIZE

        seed (int16): (Default: None)
            An integer value serving as a seed to make MILP solving reproducible.

    Returns:
        (SCIP_MILP_LP):

        A SCIP MILP/LP interface class.
    """

    def __init__(self, c, A, b, csense, lb, ub, vtype, osense, seed=None):
        super().__init__()
        ub = [u if not isinf(u) else None for u in ub]
        lb = [l if not isinf(l) else None for l in lb]
        # add variables
        self.vars = [self.addVar(lb=l, ub=u, obj=0.0, vtype=v) for l, u, v in zip(lb, ub, vtype)]
        self.trms = [list(x.terms.items())[0][0] for x in self.vars]
        # add constraint rows and their coefficients
        self.constr = []
        for a, s, b_i in zip(A, csense, b):
            if s == EQUAL:
                row = self.addCons(pso.Expr() == b_i, modifiable=True)
            elif s == LESS_EQUAL:
                row = self.addCons(pso.Expr() <= b_i, modifiable=True)
            else:
                row = self.addCons(pso.Expr() >= b_i, modifiable=True)
            for col, coeff in zip(a.indices, a.data):
                self.addConsCoeff(row, self.vars[col], coeff)
            self.constr += [row]
        self.osense = osense
        self.set_objective(c)

        self.max_tlim = self.getParam('limits/time')
        if BINARY in vtype or INTEGER in vtype:
            if seed is None:
                seed = int(random.randint(2**16 - 1))
                logging.info('  MILP Seed: ' + str(seed))
            self.setParam('randomization/randomseedshift', seed)
        self.setParam('display/verblevel', 0)

    def solve(self) -> Tuple[List, float, str]:
        """Solve the MILP or LP

        Example:
            sol_x, optim, status = scip.solve()

        Returns:
            (Tuple[List, float, str])

            solution_vector, optimal_value, optimization_status
        """
        try:
            self.optimize()
            status = self.getStatus()
            has_sols = len(self.getSols()) > 0
        except Exception:
            logging.error('Error while running SCIP.')
            return [nan] * len(self.vars), nan, ERROR
        if status == 'optimal':
            status = OPTIMAL
        elif status == 'timelimit' and has_sols:
            status = TIME_LIMIT_W_SOL
        elif status == 'timelimit':
            return [nan] * len(self.vars), nan, TIME_LIMIT
        elif status == 'infeasible':
            return [nan] * len(self.vars), nan, INFEASIBLE
        elif status in ['inforunbd', 'unbounded']:
            return [nan] * len(self.vars), inf if self.osense == MAXIMIZE else -inf, UNBOUNDED
        else:
            logging.error('SCIP returned the unhandled status ' + str(status) + '.')
            return [nan] * len(self.vars), nan, ERROR
        return self.getSolution(), self.getObjVal(), status

    def slim_solve(self) -> float:
        """Solve the MILP or LP, but return only the optimal value

        Example:
            optim = scip.slim_solve()

        Returns:
            (float)

            Optimum value of the objective function.
        """
        _, opt, status = self.solve()
        if status in [OPTIMAL, TIME_LIMIT_W_SOL, UNBOUNDED]:
            return opt
        return nan

    def set_objective(self, c):
        """Set the objective function with a vector"""
        self.freeTransform()
        self.setObjective(pso.Expr({self.trms[i]: c[i] for i in nonzero(c)[0]}),
                          sense='maximize' if self.osense == MAXIMIZE else 'minimize')

    def set_time_limit(self, t):
        """Set the computation time limit (in seconds)"""
        if t >= self.max_tlim:
            self.setParam('limits/time', self.max_tlim)
        else:
            self.setParam('limits/time', max(t, 0.0))

    def getSolution(self) -> list:
        """Retrieve solution from SCIP backend"""
        return [self.getVal(x) for x in self.vars]
