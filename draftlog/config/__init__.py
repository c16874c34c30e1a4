from .loader import load_config
from .log import configure_logging
from .models import (
    DraftlogConfig,
    HistoryConfig,
    SessionConfig,
    StagingConfig,
)

__all__ = [
    "DraftlogConfig",
    "HistoryConfig",
    "SessionConfig",
    "StagingConfig",
    "configure_logging",
    "load_config",
]
