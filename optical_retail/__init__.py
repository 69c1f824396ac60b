"""
Optical retail backend: inventory audits and financial reconciliation
"""

__version__ = "1.0.0"
