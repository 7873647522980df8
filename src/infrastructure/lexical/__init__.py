"""Lexical index implementations."""
from .forward_index import ForwardIndex, tokenize

__all__ = ["ForwardIndex", "tokenize"]
