import cobra
import optforce as of
from optforce.names import *
import logging

logging.basicConfig(level="INFO")

ecc = cobra.io.load_model('e_coli_core')

# wild-type flux ranges at fixed glucose uptake and growth rate
constr_opt = {RXN_LIST: ['EX_glc__D_e', 'BIOMASS_Ecoli_core_w_GAM'], VALUES: [-10, 0.8]}
fva_wt = of.fva(ecc, constr_opt=constr_opt)

# exchange reactions and the biomass reaction are no targets
excluded_rxns = [r.id for r in ecc.reactions if r.id.startswith('EX_') or r.id.startswith('BIOMASS')]

solution = of.find_must_ll(ecc,
                           fva_wt.minimum,
                           fva_wt.maximum,
                           constr_opt,
                           excluded_rxns,
                           max_solutions=5,
                           time_limit=300)
print(solution.status)
for rxn1, rxn2 in solution.get_must_ll():
    print(rxn1, rxn2, fva_wt.loc[rxn1, 'minimum'], fva_wt.loc[rxn2, 'minimum'])
solution.save('must_ll_e_coli_core.pkl')
