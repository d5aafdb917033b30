"""
Schedly - appointment booking engine with conflict-free slot resolution.
"""

__version__ = "0.1.0"
