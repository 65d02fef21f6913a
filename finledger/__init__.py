"""
finledger - Ledger & Budget Engine

A personal-finance tracking engine: expenses, investments and budgets go in,
budget consumption, portfolio valuation and alerts come out.

DESIGN PRINCIPLES:
1. Derived state (budget spent) is always recomputable from scratch
2. Unknown ids are a normal case, never an error
3. Persistence failures are logged, never fatal
4. Every mutation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "finledger Team"
