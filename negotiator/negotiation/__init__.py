"""
Deterministic scoring of negotiation requests
"""
from negotiator.negotiation.scoring import ScoringEngine, RandomSource, round_half_up

__all__ = [
    "ScoringEngine",
    "RandomSource",
    "round_half_up"
]
