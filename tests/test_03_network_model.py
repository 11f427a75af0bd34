"""Test the network model adapter."""
import optforce as of
from optforce.names import *
from numpy import inf
import pytest


def test_from_cobra(model_three_routes):
    """Test that a cobra model is translated to vectors and matrices."""
    net = of.NetworkModel.from_cobra(model_three_routes)
    assert (net.id == 'three_routes')
    assert (net.reac_ids == ['EX_A', 'R1', 'R2', 'R3'])
    assert (net.met_ids == ['A'])
    assert (net.S.shape == (1, 4))
    assert (net.S.toarray().tolist() == [[-1.0, -1.0, -1.0, -1.0]])
    assert (net.b == [0.0])
    assert (net.lb == [-1000.0, 0.0, 0.0, 0.0])
    assert (net.ub == [1000.0] * 4)


def test_from_dict(net_record):
    """Test that a network record is translated to vectors and matrices."""
    net = of.NetworkModel.from_dict(net_record)
    assert (net.num_reacs == 3)
    assert (net.num_mets == 1)
    assert (net.c == [0.0, 0.0, 1.0])
    assert (net.id == 'two_routes_rev')


@pytest.mark.parametrize("field", ['rxns', 'mets', 'S', 'b', 'c', 'lb', 'ub'])
def test_missing_field(net_record, field):
    """Test that a missing field is named in the error."""
    net_record.pop(field)
    with pytest.raises(Exception, match="'" + field + "'"):
        of.NetworkModel.from_dict(net_record)


def test_inconsistent_dimensions(net_record):
    """Test that matrix and identifier dimensions must match."""
    net_record['S'] = [[-1.0, -1.0]]
    with pytest.raises(Exception, match='columns'):
        of.NetworkModel.from_dict(net_record)


def test_inconsistent_vectors(net_record):
    """Test that bound vectors must match the reactions."""
    net_record['ub'] = [1000.0, 1000.0]
    with pytest.raises(Exception, match="'ub'"):
        of.NetworkModel.from_dict(net_record)


def test_duplicate_reaction(net_record):
    """Test that reaction identifiers must be unique."""
    net_record['rxns'] = ['EX_A', 'R1', 'R1']
    with pytest.raises(Exception, match='unique'):
        of.NetworkModel.from_dict(net_record)


def test_inverted_bounds(net_record):
    """Test that lower bounds must not exceed upper bounds."""
    net_record['lb'][2] = 2000.0
    with pytest.raises(Exception, match='R2'):
        of.NetworkModel.from_dict(net_record)


def test_big_m(net_record):
    """Test the validation of the big-M constant against the flux bounds."""
    net = of.NetworkModel.from_dict(net_record)
    net.check_big_M(2000.0)
    net.check_big_M(2000.0, {0: -10.0})
    with pytest.raises(Exception, match='Big-M'):
        net.check_big_M(1999.0)
    with pytest.raises(Exception, match='Big-M'):
        net.check_big_M(2000.0, {1: 1500.0})


def test_big_m_infinite_bound(net_record):
    """Test that infinite flux bounds cannot be linearized."""
    net_record['ub'][1] = inf
    net = of.NetworkModel.from_dict(net_record)
    with pytest.raises(Exception, match='R1'):
        net.check_big_M(2000.0)
