"""
Operations Layer

Business rules for the score ledger, kept free of storage and Discord I/O.

Architecture:
- Database layer: loading/saving the scores document and its backups
- Operations layer: ledger mutations, validation and queries
- Command layer: Discord integration and user interface

Modules:
- LedgerOperations: win counters, match recording, leaderboards and history
"""

from .ledger_operations import LedgerOperations

__all__ = ['LedgerOperations']
