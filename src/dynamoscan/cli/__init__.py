"""
Dynamoscan CLI Package
"""

from .main import main, analyze_transaction, audit_contract

__all__ = ['main', 'analyze_transaction', 'audit_contract']
