from .risk_scoring import RiskProfile, RiskScorer, score_profile
from .returns import build_returns
from .correlation import CorrelationEngine, build_correlation_matrix
from .portfolio import (
    Allocation,
    InstrumentRecord,
    PortfolioAssembler,
    PortfolioResult,
    ProfileTable,
    synthetic_price_curve,
)
