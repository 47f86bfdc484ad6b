"""Service modules"""
from .account_service import AccountService
from .liquidation_service import LiquidationService
from .market_service import MarketService, MarketSnapshot
from .rewards_service import RewardsService

__all__ = [
    "AccountService",
    "LiquidationService",
    "MarketService",
    "MarketSnapshot",
    "RewardsService",
]
