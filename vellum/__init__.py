"""Finite state transducer building blocks and search automata."""

__version__ = "0.1.0"