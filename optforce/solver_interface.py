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
"""Unified solver interface for LPs and MILPs (MILP_LP)"""

from numpy import inf
from scipy import sparse
from typing import List, Tuple
from optforce import avail_solvers
from optforce.names import *
import logging


class MILP_LP(object):
    """Unified MILP and LP interface

    This class is the solver oracle of the optforce package. It takes a (mixed
    integer) linear problem in row-sense form, hands it to one of the supported
    backends and returns a status and a solution vector. Problems are built
    once and solved; optforce never edits a submitted problem in place.

    Accepts a (mixed integer) linear problem in the form:
        maximize or minimize(c),
        subject to:
        A[i] * x (=|<=|>=) b[i], as given by csense[i] ('E', 'L' or 'G'),
        lb <= x <= ub,
        forall(i) type(x_i) = vtype(i) (continous, binary, integer)

    Example:
        milp = MILP_LP(c=c, A=A, b=b, csense=csense, lb=lb, ub=ub, vtype=vtype, osense=MAXIMIZE)

    Args:
        c (list of float): (Default: zeros)
            The objective vector.

        A (sparse.csr_matrix): (Default: empty)
            Coefficient matrix of all constraint rows.

        b (list of float): (Default: empty)
            The right hand side of all constraint rows.

        csense (str): (Default: 'E'*rows)
            A character string with the relational sense of each row:
            'E'qual, 'L'ess or equal, 'G'reater or equal.

        lb, ub (list of float): (Default: -inf, inf)
            The variable bounds.

        vtype (str): (Default: 'C'*columns)
            A character string that specifies the type of each variable:
            'C'ontinous, 'B'inary or 'I'nteger

        osense (str): (Default: MINIMIZE)
            Optimization direction, MAXIMIZE or MINIMIZE.

        solver (str): (Default: taken from avail_solvers)
            Solver backend that should be used: 'glpk' or 'scip'

        skip_checks (bool): (Default: False)
            Upon construction, the dimensions of all provided vectors and matrices
            are checked to verify their consistency. If skip_checks=True is set, these
            checks are skipped.

        tlim (float):
            Solution time limit in seconds.

        seed (int):
            Seed for the MILP solver (used by SCIP).

    Returns:
        (MILP_LP):

        A MILP/LP solver interface class.
    """

    def __init__(self, **kwargs):
        allowed_keys = {'c', 'A', 'b', 'csense', 'lb', 'ub', 'vtype', 'osense', 'solver', 'skip_checks', 'tlim', SEED}
        # set all keys passed in kwargs
        for key, value in kwargs.items():
            if key in allowed_keys:
                setattr(self, key, value)
            else:
                raise Exception("Key " + key + " is not supported.")
        # set all remaining keys to None
        for key in allowed_keys:
            if key not in kwargs.keys():
                setattr(self, key, None)
        if self.solver is None:
            if len(avail_solvers) > 0:
                self.solver = list(avail_solvers)[0]
            else:
                raise Exception('No solver available. Please ensure that one of the following '\
                    'solvers is avaialable in your Python environment: GLPK, SCIP')
        elif self.solver not in avail_solvers:
            raise Exception("Selected solver '" + self.solver + "' is not installed / set up correctly.")
        if self.A is not None:
            numvars = self.A.shape[1]
        elif self.c is not None:
            numvars = len(self.c)
        else:
            logging.warning('Problem has no variables.')
            numvars = 0
        if self.A is None:
            self.A = sparse.csr_matrix((0, numvars))
        if self.b is None:
            self.b = []
        if self.c is None:
            self.c = [0.0] * numvars
        if self.csense is None:
            self.csense = EQUAL * self.A.shape[0]
        if self.lb is None:
            self.lb = [-inf] * numvars
        if self.ub is None:
            self.ub = [inf] * numvars
        if self.vtype is None:
            self.vtype = CONTINUOUS * numvars
        if self.osense is None:
            self.osense = MINIMIZE
        if not self.skip_checks:
            self.check_dimensions(numvars)
        self.A = sparse.csr_matrix(self.A, dtype=float)
        self.b = [float(v) for v in self.b]
        self.c = [float(v) for v in self.c]
        self.lb = [float(v) for v in self.lb]
        self.ub = [float(v) for v in self.ub]
        # Create backend
        if self.solver == GLPK:
            from optforce.glpk_interface import GLPK_MILP_LP
            self.backend = GLPK_MILP_LP(self.c, self.A, self.b, self.csense, self.lb, self.ub, self.vtype, self.osense)
        elif self.solver == SCIP:
            from optforce.scip_interface import SCIP_MILP_LP
            self.backend = SCIP_MILP_LP(self.c, self.A, self.b, self.csense, self.lb, self.ub, self.vtype, self.osense,
                                        self.seed)
        if self.tlim is None:
            self.set_time_limit(inf)
        else:
            self.set_time_limit(self.tlim)

    def check_dimensions(self, numvars):
        """Raise if rows, columns and vectors of the problem do not fit together"""
        if not self.A.shape[0] == len(self.b):
            raise Exception("A and b must have the same number of rows/elements")
        if not self.A.shape[0] == len(self.csense):
            raise Exception("A and csense must have the same number of rows/elements")
        if any(s not in (EQUAL, LESS_EQUAL, GREATER_EQUAL) for s in self.csense):
            raise Exception("csense may only contain 'E', 'L' and 'G'")
        if not (len(self.c)==numvars and len(self.lb)==numvars and len(self.ub)==numvars and \
                len(self.vtype)==numvars):
            raise Exception("A, c, lb, ub, vtype must have the same number of columns/elements")
        if any(v not in (CONTINUOUS, BINARY, INTEGER) for v in self.vtype):
            raise Exception("vtype may only contain 'C', 'B' and 'I'")
        if self.osense not in (MAXIMIZE, MINIMIZE):
            raise Exception("osense must be '" + MAXIMIZE + "' or '" + MINIMIZE + "'")

    def solve(self) -> Tuple[List, float, str]:
        """Solve the MILP or LP

        Example:
            sol_x, optim, status = milp.solve()

        Returns:
            (Tuple[List, float, str])

            solution_vector, optimal_value, optimization_status
        """
        x, opt, status = self.backend.solve()
        if status in [OPTIMAL, TIME_LIMIT_W_SOL]:  # if solution exists, round integers
            x = [x[i] if self.vtype[i] == CONTINUOUS else int(round(x[i])) for i in range(len(x))]
        return x, opt, status

    def slim_solve(self) -> float:
        """Solve the MILP or LP, but return only the optimal value

        Example:
            optim = milp.slim_solve()

        Returns:
            (float)

            Optimum value of the objective function.
        """
        return self.backend.slim_solve()

    def set_objective(self, c):
        """Set the objective function with a vector"""
        self.c = [float(v) for v in c]
        self.backend.set_objective(self.c)

    def set_objective_idx(self, C):
        """Set the objective function with index-value pairs

        e.g.: C=[[1, 1.0], [4,-0.2]]"""
        for i, v in C:
            self.c[i] = float(v)
        self.backend.set_objective(self.c)

    def set_time_limit(self, t):
        """Set the computation time limit (in seconds)"""
        self.tlim = t
        self.backend.set_time_limit(t)
