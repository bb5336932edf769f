"""
cpswap: a two-asset constant-product exchange with per-actor swap incentives.
"""

from .config import PoolConfig, load_pool_config, pool_config_from_dict
from .core import ConstantProductExchange, Event, EventRecord
from .errors import ExchangeError
from .state.roles import Role

__version__ = "0.1.0"

__all__ = [
    "ConstantProductExchange",
    "Event",
    "EventRecord",
    "ExchangeError",
    "PoolConfig",
    "Role",
    "load_pool_config",
    "pool_config_from_dict",
]
