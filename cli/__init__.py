"""Command line tooling for xornet."""
