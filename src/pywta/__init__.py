from pywta.wta import TreeAutomaton, best_derivation
from pywta.atomic import Symbol, Derivation
from pywta.transition import Hyperarc, TransitionTable
from pywta._private.exceptions import NoFinalStateException, NegativeWeightError

__author__     = "The pywta developers"
__copyright__  = "Copyright 2026"
__credits__    = ["The pywta developers"]
__license__    = "Apache"
__version__    = "0.1"
__maintainer__ = "The pywta developers"
__status__     = "Prototype"
