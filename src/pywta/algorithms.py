#!/usr/bin/env python

"""Best-derivation search over weighted tree automata"""
import heapq
import itertools
import logging
from typing import TYPE_CHECKING, Dict, Iterator, Optional

from pywta.atomic import Derivation
from pywta._private.exceptions import NoFinalStateException

if TYPE_CHECKING:
    from .wta import TreeAutomaton

logger = logging.getLogger(__file__)


def derivations_cheapest(wta: 'TreeAutomaton') -> Iterator[Derivation]:
    """A generator that finalizes states in order of weight, cheapest first,
       yielding the optimal derivation of each state reachable from the
       initial states.

       This is Dijkstra's algorithm generalized to hyperarcs (Knuth 1977,
       "A generalization of Dijkstra's algorithm"): a binary arc is only
       relaxed once both of its operands are finalized, which is checked by
       the transition table against the finalized set. All search state is
       local to one call, so the automaton can be searched repeatedly."""

    best: Dict[object, Derivation] = {}       # Cheapest candidate so far, per state
    finalized: Dict[object, Derivation] = {}
    cntr = itertools.count()                  # FIFO among equal weights
    Q = []
    relaxations = 0

    for state, weight in wta.initialstates.items():
        node = Derivation.initial(state, weight)
        best[state] = node
        heapq.heappush(Q, (node.weight, next(cntr), node))
    logger.info(f"Searching from {len(Q)} initial state(s) over {wta.arccount()} hyperarc(s)")

    while Q:
        _, _, node = heapq.heappop(Q)
        if node is not best[node.state] or node.state in finalized:
            continue                          # Superseded after it was pushed
        finalized[node.state] = node
        logger.debug(f"Finalized state {node.state!r} with weight {node.weight}")
        yield node

        for arc in wta.transitions.usable_arcs_from(node.state, finalized):
            relaxations += 1
            candidate = Derivation.from_arc(arc, (finalized[s] for s in arc.operands))
            incumbent = best.get(candidate.state)
            if incumbent is None or candidate.weight < incumbent.weight:
                logger.debug(f"Candidate for {candidate.state!r} with weight {candidate.weight}")
                best[candidate.state] = candidate
                heapq.heappush(Q, (candidate.weight, next(cntr), candidate))

    logger.info(f"Frontier exhausted: {len(finalized)} state(s) finalized, {relaxations} relaxation(s)")


def best_derivation(wta: 'TreeAutomaton') -> Optional[Derivation]:
    """The minimum-weight derivation of the final state, or None if the
       final state cannot be reached from the initial states."""
    if wta.finalstate is None:
        raise NoFinalStateException()
    for node in derivations_cheapest(wta):
        if node.state == wta.finalstate:
            logger.info(f"Best derivation of final state {wta.finalstate!r} has weight {node.weight}")
            return node
    logger.info(f"No derivation reaches final state {wta.finalstate!r}")
    return None


def best_weight(wta: 'TreeAutomaton') -> float:
    """The weight of the best derivation of the final state. Unreachable
       final states cost infinity."""
    node = best_derivation(wta)
    return float("inf") if node is None else node.weight


def best_weights(wta: 'TreeAutomaton') -> dict:
    """The optimal weight of every state reachable from the initial states."""
    return {node.state: node.weight for node in derivations_cheapest(wta)}
