"""draftlog: reconstruct the revision history of documents kept in git."""

# history must load before events: event models reference ExtractionResult.
import draftlog.history  # noqa: F401
import draftlog.events  # noqa: F401

__version__ = "0.1.0"
