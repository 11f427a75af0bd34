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
"""GLPK solver interface for LP and MILP"""

from scipy import sparse
from numpy import nan, inf, isinf
from optforce.names import *
from typing import Tuple, List
from swiglpk import *
import logging

COL_KIND = {CONTINUOUS: GLP_CV, INTEGER: GLP_IV, BINARY: GLP_BV}
ROW_TYPE = {EQUAL: GLP_FX, LESS_EQUAL: GLP_UP, GREATER_EQUAL: GLP_LO}


def glpk_bound_type(lb, ub) -> int:
    """GLPK bound type for a variable with bounds lb <= x <= ub"""
    if isinf(lb) and isinf(ub):
        return GLP_FR
    elif isinf(ub):
        return GLP_LO
    elif isinf(lb):
        return GLP_UP
    elif lb == ub:
        return GLP_FX
    else:
        return GLP_DB


class GLPK_MILP_LP():
    """GLPK interface for MILP and LP

    This class is a wrapper for the GLPK-Python API (swiglpk) that offers the
    construction and solution of MILPs and LPs in a vector-matrix-based manner,
    with the same bindings as the other solver interfaces of the optforce package.
    Row senses and the optimization direction are passed on to GLPK natively.

    Example:
        glpk = GLPK_MILP_LP(c, A, b, csense, lb, ub, vtype, osense)

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

    Returns:
        (GLPK_MILP_LP):

        A GLPK MILP/LP interface class.
    """

    def __init__(self, c, A, b, csense, lb, ub, vtype, osense):
        self.glpk = glp_create_prob()
        # Careful with indexing! GLPK indexing starts with 1 and not with 0
        numvars = A.shape[1]
        self.ismilp = any(v != CONTINUOUS for v in vtype)

        # add variables, types and bounds. Bounds are set after the kind, because
        # GLPK resets the bounds of binary columns to [0,1]
        if numvars > 0:
            glp_add_cols(self.glpk, numvars)
        for i, (v, l, u) in enumerate(zip(vtype, lb, ub)):
            glp_set_col_kind(self.glpk, i + 1, COL_KIND[v])
            glp_set_col_bnds(self.glpk, i + 1, glpk_bound_type(l, u), float(l), float(u))

        self.set_osense(osense)
        self.set_objective(c)

        # add rows with their relational sense
        if A.shape[0] > 0:
            glp_add_rows(self.glpk, A.shape[0])
            for i, (s, b_i) in enumerate(zip(csense, b)):
                glp_set_row_bnds(self.glpk, i + 1, ROW_TYPE[s], float(b_i), float(b_i))
            A = sparse.coo_matrix(A)
            if A.nnz:
                ia = intArray(A.nnz + 1)
                ja = intArray(A.nnz + 1)
                ar = doubleArray(A.nnz + 1)
                for i, row, col, data in zip(range(A.nnz), A.row, A.col, A.data):
                    ia[i + 1] = int(row) + 1
                    ja[i + 1] = int(col) + 1
                    ar[i + 1] = float(data)
                glp_load_matrix(self.glpk, A.nnz, ia, ja, ar)

        # LP simplex parameters
        self.lp_params = glp_smcp()
        glp_init_smcp(self.lp_params)
        self.max_tlim = self.lp_params.tm_lim
        self.lp_params.tol_bnd = 1e-9
        self.lp_params.msg_lev = GLP_MSG_OFF
        # MILP parameters
        if self.ismilp:
            self.milp_params = glp_iocp()
            glp_init_iocp(self.milp_params)
            self.milp_params.presolve = GLP_ON
            self.milp_params.tol_int = 1e-12
            self.milp_params.tol_obj = 1e-9
            self.milp_params.msg_lev = GLP_MSG_OFF

    def solve(self) -> Tuple[List, float, str]:
        """Solve the MILP or LP

        Example:
            sol_x, optim, status = glpk.solve()

        Returns:
            (Tuple[List, float, str])

            solution_vector, optimal_value, optimization_status
        """
        numvars = glp_get_num_cols(self.glpk)
        try:
            opt, status, timelim_reached = self.solve_MILP_LP()
        except Exception:
            logging.error('Error while running GLPK.')
            return [nan] * numvars, nan, ERROR
        if status == GLP_OPT:
            status = OPTIMAL
        elif status == GLP_FEAS and timelim_reached:
            status = TIME_LIMIT_W_SOL
        elif status == GLP_FEAS:
            status = OPTIMAL
        elif timelim_reached:
            return [nan] * numvars, nan, TIME_LIMIT
        elif status in [GLP_INFEAS, GLP_NOFEAS]:
            return [nan] * numvars, nan, INFEASIBLE
        elif status == GLP_UNBND:
            return [nan] * numvars, inf if self.osense == MAXIMIZE else -inf, UNBOUNDED
        else:
            logging.error('GLPK returned the unhandled status code ' + str(status) + '.')
            return [nan] * numvars, nan, ERROR
        x = [round(y, 12) for y in self.getSolution()]  # workaround, round to 12 decimals
        return x, round(opt, 12), status

    def slim_solve(self) -> float:
        """Solve the MILP or LP, but return only the optimal value

        Example:
            optim = glpk.slim_solve()

        Returns:
            (float)

            Optimum value of the objective function.
        """
        _, opt, status = self.solve()
        if status == UNBOUNDED:
            return opt
        elif status not in [OPTIMAL, TIME_LIMIT_W_SOL]:
            return nan
        return opt

    def set_objective(self, c):
        """Set the objective function with a vector"""
        for i, c_i in enumerate(c):
            glp_set_obj_coef(self.glpk, i + 1, float(c_i))

    def set_osense(self, osense):
        """Set the optimization direction"""
        self.osense = osense
        glp_set_obj_dir(self.glpk, GLP_MAX if osense == MAXIMIZE else GLP_MIN)

    def set_time_limit(self, t):
        """Set the computation time limit (in seconds)"""
        if isinf(t) or t * 1000 > self.max_tlim:
            tm_lim = self.max_tlim
        else:
            tm_lim = max(int(t * 1000), 1)
        self.lp_params.tm_lim = tm_lim
        if self.ismilp:
            self.milp_params.tm_lim = tm_lim

    def getSolution(self) -> list:
        """Retrieve solution from GLPK backend"""
        if self.ismilp:
            return [glp_mip_col_val(self.glpk, i + 1) for i in range(glp_get_num_cols(self.glpk))]
        else:
            return [glp_get_col_prim(self.glpk, i + 1) for i in range(glp_get_num_cols(self.glpk))]

    def solve_MILP_LP(self) -> Tuple[float, int, bool]:
        """Trigger GLPK solution through backend"""
        # The MILP is only handed to the branch-and-cut solver if its LP relaxation is feasible.
        # GLPK occasionally crashes on infeasible MILPs, which cannot be captured from python.
        ret = glp_simplex(self.glpk, self.lp_params)
        # Feasible LPs sometimes fail in the first attempt (GLP_EFAIL) and complete when presolved
        if ret == GLP_EFAIL:
            self.lp_params.presolve = GLP_ON
            ret = glp_simplex(self.glpk, self.lp_params)
            self.lp_params.presolve = GLP_OFF
        timelim_reached = ret == GLP_ETMLIM
        status = glp_get_status(self.glpk)
        if ret == GLP_ENOPFS:
            status = GLP_NOFEAS
        elif ret == GLP_ENODFS:
            status = GLP_UNBND
        if self.ismilp and timelim_reached:
            return nan, GLP_UNDEF, timelim_reached
        if not self.ismilp or status in [GLP_INFEAS, GLP_NOFEAS, GLP_UNBND]:
            return glp_get_obj_val(self.glpk), status, timelim_reached
        ret = glp_intopt(self.glpk, self.milp_params)
        timelim_reached = ret == GLP_ETMLIM
        status = glp_mip_status(self.glpk)
        if ret == GLP_ENOPFS:
            status = GLP_NOFEAS
        return glp_mip_obj_val(self.glpk), status, timelim_reached
