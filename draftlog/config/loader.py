"""YAML config loading with env var expansion."""

import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import DraftlogConfig


def load_config(cli_path: str | None = None) -> DraftlogConfig:
    """Load config with resolution order: CLI > project-local > user-global > defaults."""
    config_paths = [
        Path(cli_path) if cli_path else None,
        Path("./draftlog.yaml"),
        Path.home() / ".draftlog" / "config.yaml",
    ]

    for path in config_paths:
        if path and path.exists():
            try:
                with open(path) as f:
                    raw = yaml.safe_load(f)
                if raw is None:
                    continue
                raw = _expand_env_vars(raw)
                return DraftlogConfig(**raw)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e
            except ValidationError as e:
                raise ValueError(f"Invalid config in {path}: {e}") from e

    return DraftlogConfig()


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings."""
    if isinstance(obj, str):
        return re.sub(r"\$\{(\w+)\}", lambda m: os.environ.get(m.group(1), ""), obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `draftlog config init`
DEFAULT_CONFIG_TEMPLATE = """\
# draftlog.yaml

# History extraction
history:
  extension: ".ulyz"             # documents tracked by filename suffix
  content_part: "Content.xml"    # archive entry holding the document text
  ignored_dirs: ["Archive", "Private", ".automation"]
  batch_size: 10                 # commits per batch
  concurrency: 4                 # paths read in parallel per commit
  max_commits: 10000
  fallback_chars: 1000           # raw XML prefix shown when no text is found

# Upload staging
staging:
  base_dir: ".tmp"

# Saved sessions
sessions:
  backend: "filesystem"          # filesystem | sqlite
  directory: "data/sessions"
  db_path: "data/sessions.db"
  retention_days: 30

# Logging
log_level: "info"                # debug | info | warn | error
log_format: "text"               # text | json
"""
