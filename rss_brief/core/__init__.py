"""
Core domain models and business logic.

This package contains data types, the error taxonomy and the subscription
store. Aggregation (``core.aggregator``) and the application state
(``core.state``) depend on the fetch layer and are imported from their
modules directly.
"""

from .errors import (
    ContentUnavailableError,
    DuplicateSubscriptionError,
    FeedFetchError,
    InsufficientContentError,
    InvalidInputError,
    ModelError,
    RssBriefError,
)
from .store import JsonFileStorage, MemoryStorage, StoragePort, SubscriptionStore
from .types import (
    AggregatedArticle,
    AnalysisResult,
    Article,
    BriefingResult,
    FeedResult,
    Subscription,
    SummaryResult,
)

__all__ = [
    "AggregatedArticle",
    "AnalysisResult",
    "Article",
    "BriefingResult",
    "ContentUnavailableError",
    "DuplicateSubscriptionError",
    "FeedFetchError",
    "FeedResult",
    "InsufficientContentError",
    "InvalidInputError",
    "JsonFileStorage",
    "MemoryStorage",
    "ModelError",
    "RssBriefError",
    "StoragePort",
    "Subscription",
    "SubscriptionStore",
    "SummaryResult",
]
