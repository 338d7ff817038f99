"""
Property-management permission engine and API.
"""

__version__ = "0.1.0"
