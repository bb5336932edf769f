"""
State tables for the constant-product exchange
"""

from .balances import BalanceTable
from .counters import SwapCounterTable
from .lp import ShareTable
from .pools import PoolState, apply_liquidity_change, apply_swap
from .roles import Role, RoleTable

__all__ = [
    "BalanceTable",
    "SwapCounterTable",
    "ShareTable",
    "PoolState",
    "apply_liquidity_change",
    "apply_swap",
    "Role",
    "RoleTable",
]
