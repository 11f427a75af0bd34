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
"""Classification of reactions into fixed, free, selectable and excluded ones"""

from typing import Dict, List, NamedTuple
from numpy import isfinite
from optforce.names import *


class ReactionPartition(NamedTuple):
    """Index sets over the reactions of a network

    All index lists are sorted ascending by reaction position. idx_fixed,
    idx_excluded, idx_selectable and idx_other_free are pairwise disjoint and
    together cover every reaction exactly once.

    Attributes:
        idx_fixed: reactions with a fixed flux value
        fixed_values: the fixed flux values, parallel to idx_fixed
        idx_free: all reactions that are not fixed
        idx_candidate: reactions with nonzero wild-type flux potential
        idx_selectable: candidates that are neither fixed nor excluded
        idx_excluded: excluded reactions that are not fixed
        idx_other_free: free reactions that are neither selectable nor excluded
    """
    idx_fixed: List[int]
    fixed_values: List[float]
    idx_free: List[int]
    idx_candidate: List[int]
    idx_selectable: List[int]
    idx_excluded: List[int]
    idx_other_free: List[int]


def candidate_mask(min_fluxes_wt, max_fluxes_wt) -> List[bool]:
    """Mark reactions whose wild-type flux range is not pinned to zero"""
    if len(min_fluxes_wt) != len(max_fluxes_wt):
        raise Exception("Wild-type minimum and maximum fluxes must have the same length.")
    return [mn != 0 or mx != 0 for mn, mx in zip(min_fluxes_wt, max_fluxes_wt)]


def parse_constr_opt(constr_opt, reac_ids) -> Dict[int, float]:
    """Translate a set of fixed flux values into {reaction index: value}

    Accepts the list form {RXN_LIST: [...], VALUES: [...]} or a plain mapping
    {reaction_id: value}.

    Example:
        fixed = parse_constr_opt({RXN_LIST: ['EX_glc', 'ATPM'], VALUES: [-10, 8.39]}, reac_ids)

    Args:
        constr_opt (dict):
            Fixed flux values.

        reac_ids (list of str):
            Reaction identifiers of the network.

    Returns:
        (dict):

        The fixed flux values, keyed by reaction index.
    """
    if not constr_opt:
        return {}
    if RXN_LIST in constr_opt or VALUES in constr_opt:
        for field in [RXN_LIST, VALUES]:
            if field not in constr_opt:
                raise Exception("Missing field '" + field + "' in " + CONSTR_OPT + ".")
        rxn_list = list(constr_opt[RXN_LIST])
        values = list(constr_opt[VALUES])
        if len(rxn_list) != len(values):
            raise Exception("Incorrect size of fields in " + CONSTR_OPT + ": " + str(len(rxn_list)) +
                            " reactions in '" + RXN_LIST + "', but " + str(len(values)) + " entries in '" + VALUES +
                            "'.")
    else:
        rxn_list = list(constr_opt.keys())
        values = list(constr_opt.values())
    idx = {r: i for i, r in enumerate(reac_ids)}
    fixed = {}
    for r, v in zip(rxn_list, values):
        if r not in idx:
            raise Exception("Reaction " + str(r) + " in " + CONSTR_OPT + " is not part of the model.")
        if idx[r] in fixed:
            raise Exception("Reaction " + str(r) + " is fixed more than once in " + CONSTR_OPT + ".")
        fixed[idx[r]] = float(v)
    return fixed


def partition_reactions(reac_ids, min_fluxes_wt, max_fluxes_wt, constr_opt=None, excluded_rxns=None) -> ReactionPartition:
    """Partition the reactions of a network for the MustLL problem

    Reactions are split into fixed ones (flux pinned by constr_opt), excluded
    ones (never selected), selectable ones (candidates that may be chosen by the
    outer problem) and the remaining free ones. A reaction that is fixed and
    excluded at the same time counts as fixed. The order in which reactions are
    listed in constr_opt or excluded_rxns has no effect on the result.

    Example:
        part = partition_reactions(reac_ids, fva_wt.minimum, fva_wt.maximum, {'EX_A': -10}, ['R3'])

    Args:
        reac_ids (list of str):
            Reaction identifiers of the network.

        min_fluxes_wt, max_fluxes_wt (list of float):
            Wild-type flux ranges (e.g. from an FVA), parallel to reac_ids.

        constr_opt (dict): (Default: None)
            Fixed flux values, see parse_constr_opt.

        excluded_rxns (list of str): (Default: None)
            Reactions that must not be part of any MustLL pair.

    Returns:
        (ReactionPartition):

        The index sets of the partition.
    """
    reac_ids = list(reac_ids)
    numr = len(reac_ids)
    if len(min_fluxes_wt) != numr:
        raise Exception("Wild-type minimum fluxes must have one entry per reaction (" + str(numr) + "), but have " +
                        str(len(min_fluxes_wt)) + ".")
    if len(max_fluxes_wt) != numr:
        raise Exception("Wild-type maximum fluxes must have one entry per reaction (" + str(numr) + "), but have " +
                        str(len(max_fluxes_wt)) + ".")
    for name, fluxes in [("minimum", min_fluxes_wt), ("maximum", max_fluxes_wt)]:
        invalid = [reac_ids[i] for i, v in enumerate(fluxes) if not isfinite(v)]
        if invalid:
            raise Exception("Wild-type " + name + " fluxes must be finite, but are NaN or infinite for reactions " +
                            str(invalid) + ".")
    fixed = parse_constr_opt(constr_opt, reac_ids)
    if excluded_rxns is None:
        excluded_rxns = []
    missing = [r for r in excluded_rxns if r not in reac_ids]
    if missing:
        raise Exception("Excluded reactions " + str(missing) + " are not part of the model.")
    excluded = set(reac_ids.index(r) for r in excluded_rxns)
    can = candidate_mask(list(min_fluxes_wt), list(max_fluxes_wt))

    idx_fixed = sorted(fixed.keys())
    idx_free = [i for i in range(numr) if i not in fixed]
    idx_excluded = [i for i in idx_free if i in excluded]
    idx_selectable = [i for i in idx_free if can[i] and i not in excluded]
    idx_other_free = [i for i in idx_free if not can[i] and i not in excluded]
    return ReactionPartition(idx_fixed=idx_fixed,
                             fixed_values=[fixed[i] for i in idx_fixed],
                             idx_free=idx_free,
                             idx_candidate=[i for i in range(numr) if can[i]],
                             idx_selectable=idx_selectable,
                             idx_excluded=idx_excluded,
                             idx_other_free=idx_other_free)
