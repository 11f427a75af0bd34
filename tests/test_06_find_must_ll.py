"""Test the enumeration of MustLL sets."""
import optforce as of
from optforce.names import *
from itertools import combinations
from numpy import nan
import pytest

# wild-type minimum of 6 per route: at an uptake of 10, every pair of routes falls below its wild-type minimum sum
MIN_WT = [-10.0, 6.0, 6.0, 6.0]
MAX_WT = [-10.0, 10.0, 10.0, 10.0]


@pytest.mark.timeout(30)
def test_single_pair(curr_solver, model_two_routes, uptake):
    """Two routes share a fixed uptake of 10 but carried at least 12 in the wild type: both must be lowered."""
    sols = of.find_must_ll(model_two_routes, MIN_WT[:3], MAX_WT[:3], uptake, solver=curr_solver)
    assert (sols.status == OPTIMAL)
    assert (sols.get_num_sols() == 1)
    assert (set(sols.get_must_ll()[0]) == {'R1', 'R2'})
    assert (set(sols.get_pos_must_ll()[0]) == {1, 2})
    assert (sorted(sols.get_must_ll_linear()) == ['R1', 'R2'])
    assert (sorted(sols.get_pos_must_ll_linear()) == [1, 2])
    assert (sols.setup[SOLVER] == curr_solver)
    assert (sols.setup[CONSTR_OPT] == {'EX_A': -10.0})


@pytest.mark.timeout(60)
def test_all_pairs(curr_solver, model_three_routes, uptake):
    """Every pair of three routes is found exactly once."""
    sols = of.find_must_ll(model_three_routes, MIN_WT, MAX_WT, uptake, solver=curr_solver)
    assert (sols.status == OPTIMAL)
    pairs = [frozenset(p) for p in sols.get_must_ll()]
    assert (set(pairs) == {frozenset(p) for p in combinations(['R1', 'R2', 'R3'], 2)})
    # no pair is found twice
    assert (len(pairs) == len(set(pairs)))
    # number of iterations is bounded by the number of pairs of selectable reactions
    assert (sols.get_num_sols() <= 3)
    # flattened list in order of first appearance
    linear = sols.get_must_ll_linear()
    assert (sorted(linear) == ['R1', 'R2', 'R3'])
    assert (list(linear[:2]) == list(sols.get_must_ll()[0]))
    for p in sols.get_must_ll():
        assert ('EX_A' not in p and p[0] != p[1])


@pytest.mark.timeout(60)
def test_determinism(curr_solver, model_three_routes, uptake):
    """Two runs produce the same pairs in the same order."""
    sols1 = of.find_must_ll(model_three_routes, MIN_WT, MAX_WT, uptake, solver=curr_solver, seed=42)
    sols2 = of.find_must_ll(model_three_routes, MIN_WT, MAX_WT, uptake, solver=curr_solver, seed=42)
    assert (sols1.get_pos_must_ll() == sols2.get_pos_must_ll())


@pytest.mark.timeout(30)
def test_no_guaranteed_pair(curr_solver, model_three_routes, uptake):
    """Wild-type minima of zero can not be undercut, so no MustLL set exists."""
    fva_wt = of.fva(model_three_routes, solver=curr_solver, constr_opt=uptake)
    sols = of.find_must_ll(model_three_routes, fva_wt.minimum, fva_wt.maximum, uptake, solver=curr_solver)
    assert (sols.status == INFEASIBLE)
    assert (sols.get_num_sols() == 0)
    assert (sols.get_must_ll_linear() == [])


@pytest.mark.timeout(30)
def test_wild_type_minimum_reachable(curr_solver, model_two_routes, uptake):
    """A pair that can still carry its wild-type minimum sum of 8 is no MustLL set."""
    sols = of.find_must_ll(model_two_routes, [-10.0, 4.0, 4.0], MAX_WT[:3], uptake, solver=curr_solver)
    assert (sols.status == INFEASIBLE)
    assert (sols.get_num_sols() == 0)


@pytest.mark.timeout(60)
def test_excluded_reaction(curr_solver, model_three_routes, uptake):
    """Pairs with an excluded reaction are never returned."""
    sols = of.find_must_ll(model_three_routes, MIN_WT, MAX_WT, uptake, ['R2'], solver=curr_solver)
    assert (sols.status == OPTIMAL)
    assert ([set(p) for p in sols.get_must_ll()] == [{'R1', 'R3'}])
    assert (sols.setup[EXCLUDED_RXNS] == ['R2'])


def test_all_candidates_excluded(curr_solver, model_two_routes, uptake):
    """Excluding every candidate leaves nothing to select."""
    min_wt = [-10.0, 0.0, 0.0]
    max_wt = [-10.0, 10.0, 10.0]
    sols = of.find_must_ll(model_two_routes, min_wt, max_wt, uptake, ['R1', 'R2'], solver=curr_solver)
    assert (sols.status == INFEASIBLE)
    assert (sols.get_num_sols() == 0)
    assert (sols.get_must_ll() == [])
    assert (sols.get_must_ll_linear() == [])
    assert (sols.get_pos_must_ll_linear() == [])


@pytest.mark.timeout(30)
def test_max_solutions(curr_solver, model_three_routes, uptake):
    """The enumeration stops after max_solutions pairs."""
    sols = of.find_must_ll(model_three_routes, MIN_WT, MAX_WT, uptake, solver=curr_solver, max_solutions=1)
    assert (sols.status == OPTIMAL)
    assert (sols.get_num_sols() == 1)


@pytest.mark.timeout(30)
def test_network_record(curr_solver, net_record):
    """MustLL sets can be computed directly on a network record."""
    sols = of.find_must_ll(net_record, [-10.0, 4.0, 7.0], [-10.0, 10.0, 10.0], {'EX_A': -10}, solver=curr_solver)
    # R1 can run in reverse, but the combined flux of R1 and R2 is always 10, below the wild-type minimum of 11
    assert (sols.status == OPTIMAL)
    assert ([set(p) for p in sols.get_must_ll()] == [{'R1', 'R2'}])


def test_save_load(tmp_path, curr_solver, model_two_routes, uptake):
    """MustLL solutions can be saved and loaded."""
    sols = of.find_must_ll(model_two_routes, MIN_WT[:3], MAX_WT[:3], uptake, solver=curr_solver)
    assert (sols.get_num_sols() == 1)
    filename = str(tmp_path / 'must_ll.pkl')
    sols.save(filename)
    loaded = of.MustLLSolutions.load(filename)
    assert (loaded.get_must_ll() == sols.get_must_ll())
    assert (loaded.status == sols.status)


def test_solution_accessors():
    """Subsets of MustLL sets can be accessed by index."""
    pairs = [of.MustLLPair(1, 2, 'R1', 'R2'), of.MustLLPair(3, 1, 'R3', 'R1')]
    sols = of.MustLLSolutions(pairs, OPTIMAL, {})
    assert (sols.get_must_ll(1) == [('R3', 'R1')])
    assert (sols.get_pos_must_ll([0]) == [(1, 2)])
    assert (sols.get_must_ll_linear() == ['R1', 'R2', 'R3'])
    assert (sols.get_pos_must_ll_linear() == [1, 2, 3])


def test_input_validation(model_two_routes, uptake):
    """Invalid inputs are rejected before anything is solved."""
    min_wt = [-10.0, 0.0, 0.0]
    max_wt = [-10.0, 10.0, 10.0]
    with pytest.raises(Exception, match='not supported'):
        of.find_must_ll(model_two_routes, min_wt, max_wt, uptake, bigM=100)
    with pytest.raises(Exception, match='Big-M'):
        of.find_must_ll(model_two_routes, min_wt, max_wt, uptake, M=100)
    with pytest.raises(Exception, match='R7'):
        of.find_must_ll(model_two_routes, min_wt, max_wt, {'R7': 1.0})
    with pytest.raises(Exception, match='maximum'):
        of.find_must_ll(model_two_routes, min_wt, max_wt[:2], uptake)
    # e.g. the result of an FVA on an infeasible wild-type model
    with pytest.raises(Exception, match='minimum fluxes must be finite'):
        of.find_must_ll(model_two_routes, [nan] * 3, [nan] * 3, uptake)


def test_time_limit(curr_solver, model_two_routes, uptake):
    """An exhausted time budget truncates the enumeration and is reported in the status."""
    sols = of.find_must_ll(model_two_routes, [-10.0, 0.0, 0.0], [-10.0, 10.0, 10.0],
                           uptake,
                           solver=curr_solver,
                           time_limit=0)
    assert (sols.status == TIME_LIMIT)
    assert (sols.get_num_sols() == 0)


@pytest.mark.timeout(30)
@pytest.mark.parametrize("failure,expected", [(ERROR, ERROR), (UNBOUNDED, UNBOUNDED), (TIME_LIMIT, TIME_LIMIT_W_SOL)])
def test_solver_failure_keeps_pairs(monkeypatch, curr_solver, model_three_routes, uptake, failure, expected):
    """A solver failure after the first pair stops the enumeration, keeps the pair and records the status."""
    solve = of.MILP_LP.solve
    calls = []

    def solve_then_fail(milp):
        calls.append(1)
        if len(calls) == 1:
            return solve(milp)
        return [nan] * len(milp.c), nan, failure

    monkeypatch.setattr(of.MILP_LP, 'solve', solve_then_fail)
    sols = of.find_must_ll(model_three_routes, MIN_WT, MAX_WT, uptake, solver=curr_solver)
    assert (len(calls) == 2)
    assert (sols.status == expected)
    assert (sols.get_num_sols() == 1)
    assert (len(set(sols.get_must_ll()[0])) == 2)
