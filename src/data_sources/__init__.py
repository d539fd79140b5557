"""Data source modules."""

from .market_data import CompanyProfile, MarketDataClient, normalize_history
