import pytest
from cobra import Configuration, Model, Metabolite, Reaction
from optforce.names import *

cobra_conf = Configuration()
bound_thres = max((abs(cobra_conf.lower_bound), abs(cobra_conf.upper_bound)))

# Initialize an empty list for solvers
solvers = [GLPK]

# Add SCIP to the list if the pyscipopt package is installed
try:
    import pyscipopt
    solvers.append(SCIP)
except ImportError:
    pass  # SCIP is not installed


@pytest.fixture(params=solvers, scope="session")
def curr_solver(request: pytest.FixtureRequest) -> str:
    """Provide session-level fixture for parametrized solver names."""
    return request.param


def build_parallel_model(num_routes, model_id) -> Model:
    """Network with one substrate A, its exchange reaction and parallel reactions consuming A."""
    model = Model(model_id)
    a = Metabolite('A', compartment='c')
    ex = Reaction('EX_A', lower_bound=-bound_thres, upper_bound=bound_thres)
    ex.add_metabolites({a: -1.0})
    reactions = [ex]
    for i in range(1, num_routes + 1):
        r = Reaction('R' + str(i), lower_bound=0.0, upper_bound=bound_thres)
        r.add_metabolites({a: -1.0})
        reactions += [r]
    model.add_reactions(reactions)
    return model


@pytest.fixture
def model_two_routes() -> Model:
    """Exchange reaction EX_A and two irreversible reactions R1, R2 consuming A."""
    return build_parallel_model(2, 'two_routes')


@pytest.fixture
def model_three_routes() -> Model:
    """Exchange reaction EX_A and three irreversible reactions R1, R2, R3 consuming A."""
    return build_parallel_model(3, 'three_routes')


@pytest.fixture
def net_record() -> dict:
    """Network record of the two-route model with a reversible reaction R1."""
    return {
        'id': 'two_routes_rev',
        'rxns': ['EX_A', 'R1', 'R2'],
        'mets': ['A'],
        'S': [[-1.0, -1.0, -1.0]],
        'b': [0.0],
        'c': [0.0, 0.0, 1.0],
        'lb': [-1000.0, -1000.0, 0.0],
        'ub': [1000.0, 1000.0, 1000.0],
    }


@pytest.fixture
def uptake() -> dict:
    """Fixed substrate uptake of 10 flux units."""
    return {RXN_LIST: ['EX_A'], VALUES: [-10.0]}
