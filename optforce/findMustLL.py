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
"""Function: Enumeration of MustLL sets (find_must_ll)"""

from cobra import Configuration
from numpy import inf
from optforce.names import *
from optforce.lptools import select_solver
from optforce.networkModel import NetworkModel
from optforce.reactionPartition import partition_reactions
from optforce.mustLLProblem import MustLLProblem
from optforce.mustLLSolutions import MustLLPair, MustLLSolutions
import time
import logging


def find_must_ll(model, min_fluxes_wt, max_fluxes_wt, constr_opt=None, excluded_rxns=None, **kwargs) -> MustLLSolutions:
    """Enumerate the MustLL sets of a metabolic network

    A MustLL set is a pair of reactions whose combined flux, even when the network
    maximizes it, stays below the combined wild-type minimum of both reactions by
    at least min_improvement. Both fluxes must therefore be lowered. The bilevel
    problem is reformulated as a single-level MILP (see MustLLProblem) and solved
    repeatedly. After every solution, cuts are added that exclude the found pair
    in both slot orders. The enumeration stops when the MILP becomes infeasible,
    when max_solutions pairs were found, when the time limit is exceeded or when
    the solver fails. Pairs that were found before a failure are kept.

    Example:
        sols = find_must_ll(model, fva_wt.minimum, fva_wt.maximum, constr_opt={'EX_glc__D_e': -10})

    Args:
        model (cobra.Model or NetworkModel or dict):
            A metabolic model that is an instance of the cobra.Model class, a NetworkModel,
            or a dict with the fields 'rxns', 'mets', 'S', 'b', 'c', 'lb' and 'ub'.

        min_fluxes_wt, max_fluxes_wt (list of float):
            Minimum and maximum wild-type fluxes (e.g. from an FVA), in the order
            of the reactions of the model.

        constr_opt (optional (dict)): (Default: None)
            Fixed flux values, either as {RXN_LIST: [...], VALUES: [...]} or as
            {reaction_id: value}.

        excluded_rxns (optional (list of str)): (Default: None)
            Reactions that must not be part of a MustLL set.

        solver (optional (str)): (Default: same as defined in model / COBRApy)
            The solver that should be used for the MILPs: 'glpk' or 'scip'.

        M (optional (float)): (Default: twice the COBRApy bound threshold, 2000)
            Big-M constant. Must be at least twice the largest flux bound.

        dual_bound (optional (float)): (Default: COBRApy bound threshold, 1000)
            Bound on the magnitude of the dual variables of the inner problem.

        min_improvement (optional (float)): (Default: 0.1)
            Minimal difference between the wild-type minimum of a pair and the
            largest flux the network can still carry through it.

        max_solutions (optional (int)): (Default: inf)
            The maximum number of MustLL sets that are generated.

        time_limit (optional (int)): (Default: inf)
            The time limit in seconds for the whole enumeration.

        seed (optional (int)): (Default: None)
            Seed for the MILP solver.

    Returns:
        (MustLLSolutions):
        MustLL sets provided as a MustLLSolutions object
    """
    allowed_keys = {SOLVER, BIG_M, DUAL_BOUND, MIN_IMPROVEMENT, MAX_SOLUTIONS, T_LIMIT, SEED}
    for key in kwargs.keys():
        if key not in allowed_keys:
            raise Exception("Key " + key + " is not supported.")
    config = {key: kwargs.get(key) for key in allowed_keys}
    bound_thres = max((abs(Configuration().lower_bound), abs(Configuration().upper_bound)))
    if config[BIG_M] is None:
        config[BIG_M] = 2 * bound_thres
    if config[DUAL_BOUND] is None:
        config[DUAL_BOUND] = bound_thres
    if config[MIN_IMPROVEMENT] is None:
        config[MIN_IMPROVEMENT] = 0.1
    if config[MAX_SOLUTIONS] is None:
        config[MAX_SOLUTIONS] = inf
    if config[T_LIMIT] is None:
        config[T_LIMIT] = inf

    # Model adapter and input validation
    if isinstance(model, NetworkModel):
        net = model
        config[SOLVER] = select_solver(config[SOLVER])
    elif isinstance(model, dict):
        net = NetworkModel.from_dict(model)
        config[SOLVER] = select_solver(config[SOLVER])
    else:
        net = NetworkModel.from_cobra(model)
        config[SOLVER] = select_solver(config[SOLVER], model)
    min_fluxes_wt = list(min_fluxes_wt)
    max_fluxes_wt = list(max_fluxes_wt)
    partition = partition_reactions(net.reac_ids, min_fluxes_wt, max_fluxes_wt, constr_opt, excluded_rxns)
    net.check_big_M(config[BIG_M], dict(zip(partition.idx_fixed, partition.fixed_values)))

    setup = {
        MODEL_ID: net.id,
        SOLVER: config[SOLVER],
        BIG_M: config[BIG_M],
        DUAL_BOUND: config[DUAL_BOUND],
        MIN_IMPROVEMENT: config[MIN_IMPROVEMENT],
        MAX_SOLUTIONS: config[MAX_SOLUTIONS],
        T_LIMIT: config[T_LIMIT],
        CONSTR_OPT: {net.reac_ids[i]: v for i, v in zip(partition.idx_fixed, partition.fixed_values)},
        EXCLUDED_RXNS: [net.reac_ids[i] for i in partition.idx_excluded],
    }

    pairs = []
    if len(partition.idx_selectable) < 2:
        logging.warning('Less than two reactions can be selected. No MustLL sets exist.')
        return MustLLSolutions(pairs, INFEASIBLE, setup)

    logging.info('Constructing MustLL MILP.')
    problem = MustLLProblem(net,
                            partition,
                            min_fluxes_wt,
                            M=config[BIG_M],
                            dual_bound=config[DUAL_BOUND],
                            min_improvement=config[MIN_IMPROVEMENT])

    endtime = time.time() + config[T_LIMIT]
    status = OPTIMAL
    logging.info('Enumerating MustLL sets ...')
    while len(pairs) < config[MAX_SOLUTIONS] and status == OPTIMAL:
        if endtime - time.time() <= 0:
            status = TIME_LIMIT
            break
        milp = problem.build_milp(pairs=[(p.idx1, p.idx2) for p in pairs],
                                  solver=config[SOLVER],
                                  tlim=endtime - time.time(),
                                  seed=config[SEED])
        x, opt, status = milp.solve()
        if status not in [OPTIMAL, TIME_LIMIT_W_SOL]:
            break
        idx1, idx2 = problem.extract_pair(x)
        pair = MustLLPair(idx1, idx2, net.reac_ids[idx1], net.reac_ids[idx2])
        logging.info('MustLL set ' + str(len(pairs) + 1) + ': ' + pair.rxn1 + ', ' + pair.rxn2 + ' (objective ' +
                     str(round(opt, 6)) + ')')
        pairs += [pair]

    if status == INFEASIBLE and pairs:  # all pairs found
        status = OPTIMAL
    if status == TIME_LIMIT and pairs:  # some pairs found, time limit reached
        status = TIME_LIMIT_W_SOL
    if status in [OPTIMAL, INFEASIBLE]:
        logging.info('Finished enumerating MustLL sets. ' + str(len(pairs)) + ' MustLL sets found.')
    else:
        logging.warning('Enumeration of MustLL sets stopped with status ' + status + ' after ' + str(len(pairs)) +
                        ' MustLL sets. The returned sets are valid, but there may be more.')
    return MustLLSolutions(pairs, status, setup)
