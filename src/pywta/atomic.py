from typing import Any, Dict, Iterator, Optional, Tuple
import itertools

from typing_extensions import Protocol, runtime_checkable

from pywta._private.exceptions import NegativeWeightError
from pywta._private.util import is_nonnegative, check_graphviz_installed


@runtime_checkable
class SymbolLike(Protocol):
    """Anything that can label a transition: comparable for equality and
       exposing a non-negative weight contribution."""
    def weight(self) -> float: ...


class Symbol:
    """An immutable transition label with a non-negative cost."""
    __slots__ = ['label', 'cost']
    def __init__(self, label, cost=0.0):
        if not is_nonnegative(cost):
            raise NegativeWeightError(cost, what="symbol cost")
        object.__setattr__(self, 'label', label)
        object.__setattr__(self, 'cost', cost)

    def weight(self) -> float:
        return self.cost

    def __setattr__(self, name, value):
        raise AttributeError(f"Symbol is immutable, cannot set '{name}'")

    def __delattr__(self, name):
        raise AttributeError(f"Symbol is immutable, cannot delete '{name}'")

    def __reduce__(self):
        return (Symbol, (self.label, self.cost))

    def __eq__(self, other):
        if not isinstance(other, Symbol):
            return NotImplemented
        return self.label == other.label and self.cost == other.cost

    def __hash__(self):
        return hash((self.label, self.cost))

    def __copy__(self):
        return Symbol(self.label, self.cost)

    def __repr__(self):
        return f"Symbol({self.label!r}, {self.cost!r})"

    def __str__(self):
        return str(self.label)


class Derivation:
    """A node in a derivation tree: the best known way of reaching `state`,
       with accumulated `weight`. Initial nodes have no symbol and no
       children; every other node records the symbol of the transition that
       built it and one (unary) or two (binary) child derivations, ordered
       like the transition's operands.

       Nodes are immutable and freely shared: one derivation may be the
       child of many later ones. Comparison operators order by weight only,
       while `==` remains identity."""

    __slots__ = 'state', 'weight', 'symbol', 'children'

    def __init__(self, state, weight, symbol: Optional[SymbolLike] = None, children: Tuple['Derivation', ...] = ()):
        object.__setattr__(self, 'state', state)
        object.__setattr__(self, 'weight', weight)
        object.__setattr__(self, 'symbol', symbol)
        object.__setattr__(self, 'children', tuple(children))

    @classmethod
    def initial(cls, state, weight=0.0) -> 'Derivation':
        """A childless start node for an initial state."""
        if not is_nonnegative(weight):
            raise NegativeWeightError(weight, what="initial weight")
        return cls(state, weight)

    @classmethod
    def from_arc(cls, arc, children) -> 'Derivation':
        """Apply a hyperarc to derivations of its operands (in operand order)."""
        children = tuple(children)
        if len(children) != len(arc.operands):
            raise ValueError(f"{arc!r} takes {len(arc.operands)} operand(s), got {len(children)}")
        weight = arc.symbol.weight() + sum(c.weight for c in children)
        return cls(arc.target, weight, arc.symbol, children)

    def __setattr__(self, name, value):
        raise AttributeError(f"Derivation is immutable, cannot set '{name}'")

    def __delattr__(self, name):
        raise AttributeError(f"Derivation is immutable, cannot delete '{name}'")

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        # Pickled as a flat list so that deep trees do not hit the recursion limit
        index, records = {}, []
        for node in self._postorder():
            index[id(node)] = len(records)
            records.append((node.state, node.weight, node.symbol, tuple(index[id(c)] for c in node.children)))
        return (_from_records, (records,))

    def _postorder(self) -> Iterator['Derivation']:
        """Each distinct node once, after all of its children."""
        seen = set()
        stack = [self]
        while stack:
            node = stack[-1]
            pending = [c for c in node.children if id(c) not in seen]
            if pending:
                stack.extend(pending)
                continue
            stack.pop()
            if id(node) not in seen:
                seen.add(id(node))
                yield node

    # ==================
    # Ordering by weight
    # ==================

    def __lt__(self, other):
        if not isinstance(other, Derivation):
            return NotImplemented
        return self.weight < other.weight

    def __le__(self, other):
        if not isinstance(other, Derivation):
            return NotImplemented
        return self.weight <= other.weight

    def __gt__(self, other):
        if not isinstance(other, Derivation):
            return NotImplemented
        return self.weight > other.weight

    def __ge__(self, other):
        if not isinstance(other, Derivation):
            return NotImplemented
        return self.weight >= other.weight

    # ==================
    # Accessors
    # ==================

    @property
    def left(self) -> Optional['Derivation']:
        return self.children[0] if self.children else None

    @property
    def right(self) -> Optional['Derivation']:
        return self.children[1] if len(self.children) > 1 else None

    @property
    def is_initial(self) -> bool:
        return self.symbol is None and not self.children

    def nodes(self) -> Iterator['Derivation']:
        """Pre-order traversal. Shared subtrees are visited once per occurrence."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def leaves(self) -> Iterator['Derivation']:
        """The initial nodes the derivation starts from, left to right."""
        return (n for n in self.nodes() if not n.children)

    def symbols(self) -> list:
        """Labels of the applied symbols in pre-order."""
        return [getattr(n.symbol, 'label', n.symbol) for n in self.nodes() if n.symbol is not None]

    def depth(self) -> int:
        """Length of the longest root-to-leaf path, counted in edges."""
        deepest = 0
        stack = [(self, 0)]
        while stack:
            node, d = stack.pop()
            deepest = max(deepest, d)
            stack.extend((c, d + 1) for c in node.children)
        return deepest

    def __len__(self):
        return sum(1 for _ in self.nodes())

    def __repr__(self):
        return f"Derivation(state={self.state!r}, weight={self.weight!r})"

    def __str__(self):
        """Bracketed form, e.g. (2:b (0) (1))."""
        done = {}   # id(node) -> bracketed string
        for node in self._postorder():
            head = str(node.state) if node.symbol is None else f"{node.state}:{node.symbol}"
            done[id(node)] = "(" + " ".join([head] + [done[id(c)] for c in node.children]) + ")"
        return done[id(self)]

    def todict(self) -> Dict[str, Any]:
        """Nested dictionary form, e.g. for export to JSON. Shared subtrees
           get a separate dictionary per occurrence."""
        root: Dict[str, Any] = {}
        stack = [(self, root)]
        while stack:
            node, out = stack.pop()
            symbol = node.symbol
            if symbol is not None:
                symbol = {"label": getattr(symbol, 'label', str(symbol)), "weight": symbol.weight()}
            out["state"] = node.state
            out["weight"] = node.weight
            out["symbol"] = symbol
            out["children"] = [{} for _ in node.children]
            stack.extend(zip(node.children, out["children"]))
        return root

    # ==================
    # Rendering
    # ==================

    def view(self, show_weights=True) -> 'graphviz.Digraph':
        """Creates a 'graphviz.Digraph' of the derivation tree, root on top.
           Will automatically display in Jupyter.

            :param show_weights: append the accumulated weight to each node
        """
        import graphviz
        if not check_graphviz_installed():
            raise EnvironmentError("Graphviz executable not found. Please install [Graphviz](https://www.graphviz.org/download/). On macOS, use `brew install graphviz`.")

        def _float_format(num):
            if not show_weights:
                return ""
            s = '{0:.2f}'.format(num).rstrip('0').rstrip('.')
            s = '0' if s == '-0' else s
            return "/" + s

        g = graphviz.Digraph('Derivation', graph_attr={"rankdir": "TB"})
        g.attr('node', shape='box', style='rounded')
        cntr = itertools.count()
        stack = [(self, str(next(cntr)))]
        while stack:
            node, nodeid = stack.pop()
            if node.is_initial:
                g.node(nodeid, graphviz.nohtml(f"{node.state}{_float_format(node.weight)}"), shape='circle')
            else:
                g.node(nodeid, graphviz.nohtml(f"{node.state}{_float_format(node.weight)}\n{node.symbol}"))
            for child in node.children:
                childid = str(next(cntr))
                g.edge(nodeid, childid)
                stack.append((child, childid))
        return g

    def render(self, view=True, filename: str = 'Derivation', format='pdf', tight=True, show_weights=True):
        """
        Renders the derivation to a file and optionally opens the file.
        :param view: If True, the rendered file will be opened.
        :param format: The file format for the Digraph. Typically 'pdf', 'png', or 'svg'.
        :param tight: If False, the rendered file will have whitespace margins around the graph.
        :param show_weights: append the accumulated weight to each node
        """
        digraph = self.view(show_weights=show_weights)
        digraph.format = format
        if tight:
            digraph.graph_attr['margin'] = '0'
        digraph.render(view=view, filename=filename, cleanup=True)


def _from_records(records) -> Derivation:
    """Rebuild a pickled derivation. Children always precede their parents
       and the root comes last."""
    nodes = []
    for state, weight, symbol, children in records:
        nodes.append(Derivation(state, weight, symbol, (nodes[i] for i in children)))
    return nodes[-1]
