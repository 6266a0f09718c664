from collections.abc import Mapping
from typing import Any, Dict, Iterable, Iterator, Optional, Union

from pywta.atomic import Derivation, Symbol, SymbolLike
from pywta.transition import Hyperarc, TransitionTable
from pywta._private.exceptions import NegativeWeightError
from pywta._private.util import is_nonnegative
from pywta import algorithms


class TreeAutomaton:
    # ==================
    # Initializers
    # ==================

    def __init__(self):
        """Creates an empty weighted bottom-up tree automaton.

        Transitions are hyperarcs from one or two operand states to a target
        state, labeled with a symbol whose weight() is added to any
        derivation using it. Derivations start from the initial states (each
        with its own starting weight) and are accepted at the final state.
        """

        self.transitions = TransitionTable()
        """The hyperarcs, indexed by operand state"""
        self.initialstates: Dict[Any, float] = {}
        """Initial states mapped to their starting weight"""
        self.finalstate = None
        """The single accepting state, None until set"""

    @classmethod
    def from_rules(cls, rules: Iterable, initial: Union[Mapping, Iterable], final=None) -> 'TreeAutomaton':
        """Build an automaton from (label, weight, operands, target) rules.

           initial -- a {state: weight} mapping, or an iterable of states
                      which then all start at weight 0.0
           final   -- the final state (may also be set later)

           For example, the rules
             [('a', 1.0, 0, 1), ('b', 3.0, (0, 1), 2)]
           give a unary arc 0 -a-> 1 and a binary arc (0, 1) -b-> 2."""
        newwta = cls()
        for label, weight, operands, target in rules:
            newwta.add_transition(Symbol(label, weight), operands, target)
        if not isinstance(initial, Mapping):
            initial = {state: 0.0 for state in initial}
        for state, weight in initial.items():
            newwta.add_initial_state(state, weight)
        if final is not None:
            newwta.set_final_state(final)
        return newwta

    @classmethod
    def fromdict(cls, wtadict: Dict) -> 'TreeAutomaton':
        """Recreate an automaton from dictionary form (see todict())."""
        initial = {state: weight for state, weight in wtadict["initial"]}
        rules = ((label, weight, tuple(operands), target)
                 for label, weight, operands, target in wtadict["transitions"])
        return cls.from_rules(rules, initial, wtadict.get("final"))

    def todict(self) -> Dict[str, Any]:
        """Create a dictionary form of the automaton for export to JSON.
           Only automata labeled with Symbol objects can be exported."""
        transitions = []
        for arc in self.transitions:
            if not isinstance(arc.symbol, Symbol):
                raise TypeError(f"Cannot export non-Symbol label {arc.symbol!r}")
            transitions.append([arc.symbol.label, arc.symbol.cost, list(arc.operands), arc.target])
        return {
            "transitions": transitions,
            # Pairs rather than a mapping, JSON object keys must be strings
            "initial": [[state, weight] for state, weight in self.initialstates.items()],
            "final": self.finalstate,
        }

    # ==================
    # Construction
    # ==================

    def add_transition(self, symbol: SymbolLike, operands, target) -> Hyperarc:
        """Add a hyperarc. operands is a state (unary) or a pair of states
           (binary); symbol must have a non-negative weight()."""
        return self.transitions.add(symbol, operands, target)

    def add_initial_state(self, state, weight=0.0):
        """Declare state initial with a starting weight. Declaring the same
           state twice keeps the cheaper weight."""
        if not is_nonnegative(weight):
            raise NegativeWeightError(weight, what="initial weight")
        if state not in self.initialstates or weight < self.initialstates[state]:
            self.initialstates[state] = weight

    def set_final_state(self, finalstate):
        self.finalstate = finalstate

    # ==================
    # Search
    # ==================

    def best_derivation(self) -> Optional[Derivation]:
        """The minimum-weight derivation of the final state, or None if it
           is unreachable. Raises NoFinalStateException if no final state
           is set."""
        return algorithms.best_derivation(self)

    find_path = best_derivation

    def best_weight(self) -> float:
        """Weight of the best derivation, float('inf') if there is none."""
        return algorithms.best_weight(self)

    def best_weights(self) -> dict:
        """The optimal weight of every reachable state."""
        return algorithms.best_weights(self)

    def derivations_cheapest(self) -> Iterator[Derivation]:
        """A generator to yield the optimal derivation of each reachable
           state, cheapest first."""
        return algorithms.derivations_cheapest(self)

    # ==================
    # Utilities
    # ==================

    @property
    def states(self) -> set:
        """Every state mentioned by an arc, the initial states and the final state."""
        states = self.transitions.states() | set(self.initialstates)
        if self.finalstate is not None:
            states.add(self.finalstate)
        return states

    def arccount(self) -> int:
        """Counts number of hyperarcs."""
        return len(self.transitions)

    def copy(self) -> 'TreeAutomaton':
        """A new automaton with the same arcs, initial and final states.
           Symbols are shared, not copied."""
        newwta = TreeAutomaton()
        for arc in self.transitions:
            newwta.add_transition(arc.symbol, arc.operands, arc.target)
        newwta.initialstates = dict(self.initialstates)
        newwta.finalstate = self.finalstate
        return newwta

    __copy__ = copy

    def __len__(self):
        """Return the number of states."""
        return len(self.states)

    def __str__(self):
        """One line per hyperarc (operands, target, label, weight), then the
           initial states with their weights and the final state."""
        st = ""
        for arc in self.transitions:
            st += '{}\t{}\t{}\t{}\n'.format(' '.join(str(s) for s in arc.operands),
                                             arc.target, arc.symbol, arc.symbol.weight())
        for state, weight in self.initialstates.items():
            st += 'initial\t{}\t{}\n'.format(state, weight)
        if self.finalstate is not None:
            st += 'final\t{}\n'.format(self.finalstate)
        return st


# ==================
# Global Functions
# ==================
def best_derivation(wta: 'TreeAutomaton'):
    return wta.best_derivation()
