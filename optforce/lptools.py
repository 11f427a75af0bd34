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
"""Solver selection and flux variability analysis (select_solver, fva)"""

from cobra import Configuration
from scipy import sparse
from re import search
from pandas import DataFrame
from numpy import nan
from optforce import avail_solvers, MILP_LP
from optforce.networkModel import NetworkModel
from optforce.reactionPartition import parse_constr_opt
from optforce.names import *
import logging


def select_solver(solver=None, model=None) -> str:
    """Select a solver for subsequent MILP/LP computations

    This function will determine the solver to be used for subsequent MILP/LP computations. If no
    argument is provided, this function will try to determine the currently selected solver from the
    COBRA configuration. If unavailable, one of the solvers available at package initialization is
    returned.
    One may provide a solver or a model manually. This function then checks if the selected solver
    is available, or else, if the solver indicated in the model is available. If both arguments are
    specified, the function prefers 'solver' over 'model'.

    Example:
        solver = select_solver('scip')

    Args:
        solver (optional (str)):
            A user preferred solver, that should be checked for availability: 'glpk' or 'scip'.

        model (optional (cobra.Model)):
            A metabolic model that is an instance of the cobra.Model class. The function will try to
            determine the selected solver by accessing the field model.solver.

    Returns:
        (str):
            The selected solver name as a str ('glpk' or 'scip').
    """
    if not avail_solvers:
        raise Exception('No solver available. Please ensure that one of the following '\
            'solvers is avaialable in your Python environment: GLPK, SCIP')
    pattern = '(' + '|'.join(sorted(avail_solvers)) + ')'
    # first try to use selected solver
    if solver:
        if solver in avail_solvers:
            return solver
        else:
            logging.warning('Selected solver ' + solver + ' not available. Using ' + sorted(avail_solvers)[0] + " instead.")
    # if no solver was defined, use solver specified in model
    if hasattr(model, 'solver') and hasattr(model.solver, 'interface'):
        match = search(pattern, model.solver.interface.__name__)
        if match is not None:
            return match[0]
        logging.warning('Solver specified in model (' + model.solver.interface.__name__ + ') unavailable')
    # if no solver specified in model, use solver from cobra configuration
    cobra_conf = Configuration()
    if hasattr(cobra_conf, 'solver') and hasattr(cobra_conf.solver, '__name__'):
        match = search(pattern, cobra_conf.solver.__name__)
        if match is not None:
            return match[0]
        logging.warning('Solver specified in cobra config (' + cobra_conf.solver.__name__ + ') unavailable')
    # fall back to the available solvers
    return sorted(avail_solvers)[0]


def idx2c(i, prev) -> list:
    """Helper function for FVA

    Objective for the i-th LP of an FVA. Even i maximize and odd i minimize the flux
    through reaction i//2. Returns the index-value pairs that turn the previous
    objective into the current one."""
    col = i // 2
    sig = 1.0 if i % 2 else -1.0
    C = [[col, sig]]
    if prev != col:
        C += [[prev, 0.0]]
    return C


def fva(model, **kwargs) -> DataFrame:
    """Flux Variability Analysis (FVA)

    Flux Variability Analysis determines the global flux ranges of reactions by minimizing and
    maximizing the flux through all reactions of a given metabolic network. The flux states can
    be narrowed down by fixing the flux values of some reactions. The result is the wild-type
    flux range expected by find_must_ll.

    Example:
        flux_ranges = fva(model, constr_opt={'EX_glc__D_e': -10}, solver='glpk')

    Args:
        model (cobra.Model or NetworkModel):
            A metabolic model.

        solver (optional (str)):
            The solver that should be used for FVA.

        constr_opt (optional (dict)): (Default: None)
            Fixed flux values, either as {RXN_LIST: [...], VALUES: [...]} or as
            {reaction_id: value}.

    Returns:
        (pandas.DataFrame):
            A data frame containing the minimum and maximum attainable flux rates for all reactions.
    """
    allowed_keys = {SOLVER, CONSTR_OPT}
    for key in kwargs.keys():
        if key not in allowed_keys:
            raise Exception("Key " + key + " is not supported.")
    if isinstance(model, NetworkModel):
        net = model
        solver = select_solver(kwargs.get(SOLVER))
    else:
        net = NetworkModel.from_cobra(model)
        solver = select_solver(kwargs.get(SOLVER), model)
    numr = net.num_reacs
    fixed = parse_constr_opt(kwargs.get(CONSTR_OPT), net.reac_ids)

    # prepare vectors and matrices
    A_fix = sparse.csr_matrix(([1.0] * len(fixed), (range(len(fixed)), list(fixed.keys()))), shape=(len(fixed), numr))
    A = sparse.vstack((net.S, A_fix)).tocsr()
    b = net.b + list(fixed.values())

    # build LP
    lp = MILP_LP(A=A, b=b, csense=EQUAL * A.shape[0], lb=net.lb, ub=net.ub, solver=solver)
    _, _, status = lp.solve()
    if status not in [OPTIMAL, UNBOUNDED]:  # if problem not feasible or unbounded
        logging.error('FVA problem not feasible.')
        return DataFrame(
            {
                "minimum": [nan] * numr,
                "maximum": [nan] * numr,
            },
            index=net.reac_ids,
        )

    # minimize -v_j (maximum) and v_j (minimum) for all reactions
    x = [nan] * 2 * numr
    prev = 0
    for i in range(2 * numr):
        lp.set_objective_idx(idx2c(i, prev))
        prev = i // 2
        x[i] = lp.slim_solve()

    x = [0.0 if abs(v) < 1e-11 else v for v in x]  # cut off for very small absolute values
    fva_result = DataFrame(
        {
            "minimum": [x[i] for i in range(1, 2 * numr, 2)],
            "maximum": [-x[i] for i in range(0, 2 * numr, 2)],
        },
        index=net.reac_ids,
    )

    return fva_result
