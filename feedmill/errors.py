class FeedError(Exception):
    """Base class for everything that can abort a feed refresh."""


class ConfigError(FeedError):
    pass


class SourceError(FeedError):
    """The upstream item list could not be fetched."""


class EnrichmentError(FeedError):
    """A single item could not be resolved or fetched; the whole batch fails."""


class BatchTimeoutError(FeedError):
    """The batch deadline expired before every item was enriched."""
