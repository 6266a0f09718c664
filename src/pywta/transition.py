from collections import defaultdict
from typing import Dict, Iterator, List, Optional, Set, Tuple

from pywta.atomic import SymbolLike
from pywta._private.exceptions import NegativeWeightError
from pywta._private.util import is_nonnegative


class Hyperarc:
    """A transition `operands -> target` labeled with `symbol`. Operands are
       a 1-tuple (unary) or a 2-tuple (binary) of states."""
    __slots__ = ['operands', 'symbol', 'target']
    def __init__(self, operands: Tuple, symbol: SymbolLike, target):
        self.operands = operands
        self.symbol = symbol
        self.target = target

    @property
    def arity(self) -> int:
        return len(self.operands)

    @property
    def is_binary(self) -> bool:
        return len(self.operands) == 2

    def __repr__(self):
        return f"Hyperarc({self.operands!r}, {self.symbol!r}, {self.target!r})"


def normalize_operands(operands) -> Tuple:
    """A bare state means a unary arc; tuples must hold one or two states."""
    if not isinstance(operands, tuple):
        return (operands,)
    if len(operands) not in (1, 2):
        raise ValueError(f"A hyperarc takes one or two operand states, got {operands!r}")
    return operands


class TransitionTable:
    """Hyperarcs indexed by operand state.

       Every arc is stored under each of its operands, together with the
       other operand (the partner) it still needs: a binary arc (a, b) is
       kept under a with partner b and under b with partner a, so it is
       found from whichever operand is finalized last. Unary arcs have no
       partner."""

    def __init__(self):
        self.items: Dict[object, List[Tuple[Optional[object], Hyperarc]]] = defaultdict(list)
        self.arcs: List[Hyperarc] = []

    def add(self, symbol: SymbolLike, operands, target) -> Hyperarc:
        """Register a hyperarc. No duplicate detection is done."""
        if not isinstance(symbol, SymbolLike):
            raise TypeError(f"{symbol!r} has no weight() and cannot label a hyperarc")
        if not is_nonnegative(symbol.weight()):
            raise NegativeWeightError(symbol.weight(), what="symbol weight")
        arc = Hyperarc(normalize_operands(operands), symbol, target)
        if arc.is_binary:
            a, b = arc.operands
            self.items[a].append((b, arc))
            if a != b:
                self.items[b].append((a, arc))
        else:
            self.items[arc.operands[0]].append((None, arc))
        self.arcs.append(arc)
        return arc

    def usable_arcs_from(self, state, finalized) -> List[Hyperarc]:
        """Arcs keyed by state whose partner (if any) is a key of finalized,
           in registration order."""
        return [arc for partner, arc in self.items.get(state, ())
                if not arc.is_binary or partner in finalized]

    def arcs_from(self, state) -> List[Hyperarc]:
        """All arcs in which state is an operand."""
        return [arc for _, arc in self.items.get(state, ())]

    def states(self) -> Set:
        """Every state mentioned as an operand or a target."""
        return {s for arc in self.arcs for s in arc.operands} | {arc.target for arc in self.arcs}

    def __iter__(self) -> Iterator[Hyperarc]:
        return iter(self.arcs)

    def __len__(self):
        return len(self.arcs)
