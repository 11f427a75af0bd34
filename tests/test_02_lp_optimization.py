"""Test if FVA finishes correctly and yields the wild-type flux ranges."""
import optforce as of
from optforce.names import *
from numpy import inf, isinf, isnan
import pytest


@pytest.mark.timeout(15)
def test_fva(curr_solver, model_two_routes, uptake):
    """Test FVA with fixed substrate uptake."""
    sol = of.fva(model_two_routes, solver=curr_solver, constr_opt=uptake)
    assert (sol.shape == (3, 2))
    assert (list(sol.index) == ['EX_A', 'R1', 'R2'])
    assert (round(sol.loc['EX_A', 'minimum'], 9) == -10.0 and round(sol.loc['EX_A', 'maximum'], 9) == -10.0)
    assert (sol.loc['R1', 'minimum'] == 0.0 and round(sol.loc['R1', 'maximum'], 9) == 10.0)
    assert (sol.loc['R2', 'minimum'] == 0.0 and round(sol.loc['R2', 'maximum'], 9) == 10.0)


@pytest.mark.timeout(15)
def test_fva_dict_constraints(curr_solver, model_three_routes):
    """Test FVA with fixed values given as a mapping."""
    sol = of.fva(model_three_routes, solver=curr_solver, constr_opt={'EX_A': -6, 'R3': 2})
    assert (round(sol.loc['R1', 'maximum'], 9) == 4.0)
    assert (sol.loc['R2', 'minimum'] == 0.0)
    assert (round(sol.loc['R3', 'minimum'], 9) == 2.0)


@pytest.mark.timeout(15)
def test_fva_network_model(curr_solver, net_record):
    """Test FVA on a network model record."""
    net = of.NetworkModel.from_dict(net_record)
    sol = of.fva(net, solver=curr_solver, constr_opt={'EX_A': -10})
    assert (round(sol.loc['R1', 'minimum'], 9) == -990.0)
    assert (round(sol.loc['R2', 'maximum'], 9) == 1000.0)


@pytest.mark.timeout(15)
def test_fva_infeasible(curr_solver, model_two_routes):
    """Test infeasible FVA."""
    sol = of.fva(model_two_routes, solver=curr_solver, constr_opt={'EX_A': 10})
    assert (sol.shape == (3, 2))
    assert (isnan(sol.values[1, 1]))


@pytest.mark.timeout(15)
def test_fva_unbounded(curr_solver, model_two_routes):
    """Test FVA that is partially unbounded."""
    model_two_routes.reactions.EX_A.lower_bound = -inf
    model_two_routes.reactions.R1.upper_bound = inf
    sol = of.fva(model_two_routes, solver=curr_solver)
    assert (isinf(sol.loc['R1', 'maximum']))
    assert (sol.loc['R2', 'minimum'] == 0.0)


def test_fva_unsupported_key(model_two_routes):
    """Test that unknown keywords are rejected."""
    with pytest.raises(Exception, match='not supported'):
        of.fva(model_two_routes, constraints='EX_A = -10')
