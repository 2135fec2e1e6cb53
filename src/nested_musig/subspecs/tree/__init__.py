"""Binary aggregation trees built over an ordered set of participants."""

from .bintree import BinTree, Combine, Leaf, Node

__all__ = ["BinTree", "Combine", "Leaf", "Node"]
