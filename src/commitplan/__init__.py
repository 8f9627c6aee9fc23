"""
commitplan - turns a set of working-tree changes into an ordered plan of
atomic, validated commits.
"""

__version__ = "0.1.0"
