import cobra
import optforce as of
from optforce.names import *
import logging

logging.basicConfig(level="INFO")

# substrate A is taken up at a fixed rate and consumed by two routes R1 and R2
model = cobra.Model('toy')
a = cobra.Metabolite('A', compartment='c')
ex = cobra.Reaction('EX_A', lower_bound=-1000, upper_bound=1000)
ex.add_metabolites({a: -1})
r1 = cobra.Reaction('R1', lower_bound=0, upper_bound=1000)
r1.add_metabolites({a: -1})
r2 = cobra.Reaction('R2', lower_bound=0, upper_bound=1000)
r2.add_metabolites({a: -1})
model.add_reactions([ex, r1, r2])

# the wild type takes up 10 units of A and routes 6 of them through R1
fva_wt = of.fva(model, constr_opt={'EX_A': -10, 'R1': 6})
print(fva_wt)

# at an uptake of 5, R1 and R2 together carry at most 5, below their wild-type minimum of 10
constr_opt = {RXN_LIST: ['EX_A'], VALUES: [-5]}
solution = of.find_must_ll(model, fva_wt.minimum, fva_wt.maximum, constr_opt)
print(solution.status)
print(solution.get_must_ll())
print(solution.get_must_ll_linear())
