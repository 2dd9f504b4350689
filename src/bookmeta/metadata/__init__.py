# ABOUTME: Metadata package: query/candidate types, ISBN codec, scoring, and provider clients.
# ABOUTME: Exports the core data types and the ProviderClient protocol used throughout bookmeta.

from bookmeta.metadata.provider import ProviderClient
from bookmeta.metadata.types import (
    BookQuery,
    BookRecord,
    Candidate,
    ProviderIdKey,
    ScoredCandidate,
)

__all__ = [
    "BookQuery",
    "BookRecord",
    "Candidate",
    "ProviderClient",
    "ProviderIdKey",
    "ScoredCandidate",
]
