"""Core numerical primitives for xornet."""

from . import activations, errors, init, losses, network, rng, types

__all__ = ["activations", "errors", "init", "losses", "network", "rng", "types"]
