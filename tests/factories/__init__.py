"""
Test factories for generating realistic test data.

Uses factory_boy for declarative test data generation.
"""

from .estimate import (
    LineItemFactory,
    ServiceLineItemFactory,
    EstimateFactory,
    FinalEstimateFactory,
)

__all__ = [
    "LineItemFactory",
    "ServiceLineItemFactory",
    "EstimateFactory",
    "FinalEstimateFactory",
]
