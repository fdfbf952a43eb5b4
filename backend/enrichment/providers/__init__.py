"""Provider adapters used by the enrichment passes."""
from .base import DirectUrlProvider, ProviderLookup, StreamingOffer
from .motn import MotnProvider
from .tmdb import TmdbClient
from .watchmode import WatchmodeProvider

__all__ = [
    "DirectUrlProvider",
    "MotnProvider",
    "ProviderLookup",
    "StreamingOffer",
    "TmdbClient",
    "WatchmodeProvider",
]
