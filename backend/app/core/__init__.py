"""Core casting engine: intent reducer, move/reorder engines, consensus, and the store."""
from .state_reducer import initial_state, apply_intent, reduce_intent, reduce_intents
from .store import CastingStore, DispatchOutcome

__all__ = [
    "initial_state",
    "apply_intent",
    "reduce_intent",
    "reduce_intents",
    "CastingStore",
    "DispatchOutcome",
]
