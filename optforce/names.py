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
"""Static strings used in the optforce package

    Model and constraints

        MODEL_ID = 'model_id'

        RXN_LIST = 'rxn_list'

        VALUES = 'values'

        CONSTR_OPT = 'constr_opt'

        EXCLUDED_RXNS = 'excluded_rxns'

    Solvers and status codes

        SOLVER = 'solver'

        GLPK = 'glpk'

        SCIP = 'scip'

        OPTIMAL = 'optimal' # from optlang interface

        INFEASIBLE ='infeasible' # from optlang interface

        TIME_LIMIT = 'time_limit' # from optlang interface

        UNBOUNDED = 'unbounded' # from optlang interface

        TIME_LIMIT_W_SOL = 'time_limit_w_sols'

        ERROR = 'error'

    Row senses and variable types

        EQUAL = 'E'

        LESS_EQUAL = 'L'

        GREATER_EQUAL = 'G'

        CONTINUOUS = 'C'

        BINARY = 'B'

        INTEGER = 'I'

    MustLL setup

        BIG_M = 'M'

        DUAL_BOUND = 'dual_bound'

        MIN_IMPROVEMENT = 'min_improvement'

        MAX_SOLUTIONS = 'max_solutions'

        T_LIMIT = 'time_limit'

        SEED = 'seed'

    Analysis

        MAXIMIZE = 'maximize'

        MINIMIZE = 'minimize'
"""

# Model and constraints
MODEL_ID = 'model_id'
RXN_LIST = 'rxn_list'
VALUES = 'values'
CONSTR_OPT = 'constr_opt'
EXCLUDED_RXNS = 'excluded_rxns'

# Solvers and status codes
SOLVER = 'solver'
GLPK = 'glpk'
SCIP = 'scip'
from optlang.interface import OPTIMAL,    \
                              INFEASIBLE, \
                              TIME_LIMIT, \
                              UNBOUNDED

TIME_LIMIT_W_SOL = 'time_limit_w_sols'
ERROR = 'error'

# Row senses and variable types
EQUAL = 'E'
LESS_EQUAL = 'L'
GREATER_EQUAL = 'G'
CONTINUOUS = 'C'
BINARY = 'B'
INTEGER = 'I'

# MustLL setup
BIG_M = 'M'
DUAL_BOUND = 'dual_bound'
MIN_IMPROVEMENT = 'min_improvement'
MAX_SOLUTIONS = 'max_solutions'
T_LIMIT = 'time_limit'
SEED = 'seed'

# Analysis
MAXIMIZE = 'maximize'
MINIMIZE = 'minimize'
