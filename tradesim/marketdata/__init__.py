"""Price snapshot handling and feeds."""

from tradesim.marketdata.feed import QuoteFeed, ReplayQuoteFeed, Snapshot, normalize_snapshot

__all__ = ["QuoteFeed", "ReplayQuoteFeed", "Snapshot", "normalize_snapshot"]
