"""ragdesk configuration loader.

Priority (high → low):
  1. CLI flags           (handled at call site, not in this module)
  2. Environment variables  (RAGDESK_EMBEDDING_MODEL, RAGDESK_GENERATION_MODEL,
                             RAGDESK_LOG_LEVEL)
  3. Per-project ragdesk.yaml  (next to .ragdesk.db)
  4. Global ~/.ragdesk/config.yaml  (model defaults only, no API keys)
  5. Hardcoded defaults

Global config must never contain API keys; use environment variables instead.
All YAML reads use yaml.safe_load(), never yaml.load().
"""

from __future__ import annotations

import os
import re
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ragdesk.rag.orchestrator import DEFAULT_SUGGESTIONS

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_GLOBAL_CONFIG_DIR: Path = Path.home() / ".ragdesk"
_GLOBAL_CONFIG_PATH: Path = _GLOBAL_CONFIG_DIR / "config.yaml"
_PROJECT_CONFIG_NAME: str = "ragdesk.yaml"

# Fields that suggest an API key; forbidden in global config.
# Does NOT match legitimate config keys like max_tokens.
_API_KEY_RE: re.Pattern[str] = re.compile(
    r"api[_\-]?(?:key|secret)"  # api_key, api-key, api_secret, apikey
    r"|_token$"                  # github_token, access_token (suffix)
    r"|^token$"
    r"|_secret$"
    r"|^secret$"
    r"|passw(?:ord|d)"
    r"|credential",
    re.IGNORECASE,
)

_KNOWN_SECTIONS: frozenset[str] = frozenset(
    ["embedding", "generation", "retrieval", "chunking", "storage", "logging"]
)

_LOG_LEVELS: frozenset[str] = frozenset(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(ValueError):
    """Raised when a config file contains an invalid or forbidden value."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class EmbeddingCfg:
    """Embedding model configuration (ragdesk.yaml: embedding:)."""

    model: str = "gemini/text-embedding-004"
    timeout: float = 30.0


@dataclass
class GenerationCfg:
    """Answer generation configuration (ragdesk.yaml: generation:)."""

    model: str = "gemini/gemini-1.5-flash"
    temperature: float = 0.3
    max_tokens: int = 1024
    timeout: float = 60.0
    assistant_name: str = "DeskBot"
    organization: str = ""


@dataclass
class RetrievalCfg:
    """Retrieval configuration (ragdesk.yaml: retrieval:).

    Attributes:
        top_k: Matches requested from the vector index per question.
        similarity_threshold: Minimum similarity for a confident match.
        context_budget: Maximum context length in characters.
        fallback_contact: Who the fallback answer points people to.
        suggestions: Example questions offered to users.
    """

    top_k: int = 5
    similarity_threshold: float = 0.6
    context_budget: int = 4000
    fallback_contact: str = "Human Resources"
    suggestions: list[str] = field(default_factory=lambda: list(DEFAULT_SUGGESTIONS))


@dataclass
class ChunkingCfg:
    chunk_size: int = 1000
    overlap: int = 100


@dataclass
class StorageCfg:
    """Uploaded file storage (ragdesk.yaml: storage:)."""

    path: str = "storage/documents"
    max_file_size_mb: int = 50
    max_workers: int = 4


@dataclass
class LoggingCfg:
    level: str = "INFO"
    json: bool = False


@dataclass
class RagdeskConfig:
    """Root configuration object, built by load_config() from merged YAML layers."""

    embedding: EmbeddingCfg = field(default_factory=EmbeddingCfg)
    generation: GenerationCfg = field(default_factory=GenerationCfg)
    retrieval: RetrievalCfg = field(default_factory=RetrievalCfg)
    chunking: ChunkingCfg = field(default_factory=ChunkingCfg)
    storage: StorageCfg = field(default_factory=StorageCfg)
    logging: LoggingCfg = field(default_factory=LoggingCfg)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _check_no_api_keys(data: dict[str, Any], source: Path) -> None:
    """Raise ConfigError if *data* contains any API-key-like key names."""

    def _scan(obj: Any, path: str) -> None:
        if isinstance(obj, dict):
            for k, v in obj.items():
                full = f"{path}.{k}" if path else k
                if _API_KEY_RE.search(str(k)):
                    raise ConfigError(
                        f"Global config '{source}' contains a forbidden key '{full}'.\n"
                        f"  API keys must be set via environment variables, not config files.\n"
                        f"  Remove '{full}' from {source.name} and use:\n"
                        f"    export {str(k).upper().replace('-', '_')}=<value>"
                    )
                _scan(v, full)

    _scan(data, "")


def _warn_unknown_keys(data: dict[str, Any], source: Path) -> None:
    """Emit a UserWarning for unrecognised top-level keys."""
    for key in data:
        if key not in _KNOWN_SECTIONS:
            warnings.warn(
                f"Unknown config key '{key}' in '{source}', ignored.",
                UserWarning,
                stacklevel=4,
            )


def _validate(cfg: RagdeskConfig) -> None:
    if cfg.chunking.chunk_size < 1:
        raise ConfigError(f"chunking.chunk_size must be >= 1, got {cfg.chunking.chunk_size}")
    if not 0 <= cfg.chunking.overlap < cfg.chunking.chunk_size:
        raise ConfigError(
            f"chunking.overlap must be in [0, chunk_size), got {cfg.chunking.overlap}"
        )
    if cfg.retrieval.top_k < 1:
        raise ConfigError(f"retrieval.top_k must be >= 1, got {cfg.retrieval.top_k}")
    if not -1.0 <= cfg.retrieval.similarity_threshold <= 1.0:
        raise ConfigError(
            "retrieval.similarity_threshold must be in [-1, 1], "
            f"got {cfg.retrieval.similarity_threshold}"
        )
    if cfg.logging.level not in _LOG_LEVELS:
        raise ConfigError(
            f"logging.level must be one of {', '.join(sorted(_LOG_LEVELS))}, "
            f"got '{cfg.logging.level}'"
        )


# ---------------------------------------------------------------------------
# Merge + build
# ---------------------------------------------------------------------------


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict that is *base* deep-merged with *override*."""
    result = dict(base)
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _cfg_from_dict(data: dict[str, Any]) -> RagdeskConfig:
    """Build a *RagdeskConfig* from a merged raw YAML dict."""
    cfg = RagdeskConfig()

    if "embedding" in data:
        e = data["embedding"] or {}
        cfg.embedding = EmbeddingCfg(
            model=str(e.get("model", cfg.embedding.model)),
            timeout=float(e.get("timeout", cfg.embedding.timeout)),
        )

    if "generation" in data:
        g = data["generation"] or {}
        cfg.generation = GenerationCfg(
            model=str(g.get("model", cfg.generation.model)),
            temperature=float(g.get("temperature", cfg.generation.temperature)),
            max_tokens=int(g.get("max_tokens", cfg.generation.max_tokens)),
            timeout=float(g.get("timeout", cfg.generation.timeout)),
            assistant_name=str(g.get("assistant_name", cfg.generation.assistant_name)),
            organization=str(g.get("organization", cfg.generation.organization)),
        )

    if "retrieval" in data:
        r = data["retrieval"] or {}
        suggestions = r.get("suggestions")
        cfg.retrieval = RetrievalCfg(
            top_k=int(r.get("top_k", cfg.retrieval.top_k)),
            similarity_threshold=float(
                r.get("similarity_threshold", cfg.retrieval.similarity_threshold)
            ),
            context_budget=int(r.get("context_budget", cfg.retrieval.context_budget)),
            fallback_contact=str(r.get("fallback_contact", cfg.retrieval.fallback_contact)),
            suggestions=(
                [str(s) for s in suggestions]
                if suggestions is not None
                else cfg.retrieval.suggestions
            ),
        )

    if "chunking" in data:
        c = data["chunking"] or {}
        cfg.chunking = ChunkingCfg(
            chunk_size=int(c.get("chunk_size", cfg.chunking.chunk_size)),
            overlap=int(c.get("overlap", cfg.chunking.overlap)),
        )

    if "storage" in data:
        s = data["storage"] or {}
        cfg.storage = StorageCfg(
            path=str(s.get("path", cfg.storage.path)),
            max_file_size_mb=int(s.get("max_file_size_mb", cfg.storage.max_file_size_mb)),
            max_workers=int(s.get("max_workers", cfg.storage.max_workers)),
        )

    if "logging" in data:
        lg = data["logging"] or {}
        cfg.logging = LoggingCfg(
            level=str(lg.get("level", cfg.logging.level)).upper(),
            json=bool(lg.get("json", cfg.logging.json)),
        )

    return cfg


def _apply_env_overrides(cfg: RagdeskConfig) -> RagdeskConfig:
    """Apply RAGDESK_* environment variable overrides (layer 2)."""
    if model := os.environ.get("RAGDESK_GENERATION_MODEL"):
        cfg.generation.model = model
    if model := os.environ.get("RAGDESK_EMBEDDING_MODEL"):
        cfg.embedding.model = model
    if level := os.environ.get("RAGDESK_LOG_LEVEL"):
        cfg.logging.level = level.upper()
    return cfg


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    project_dir: Path | None = None,
    *,
    global_config_path: Path | None = None,
) -> RagdeskConfig:
    """Load and return a merged *RagdeskConfig*.

    Applies layers in order: global → per-project → env vars.
    CLI flag overrides must be applied by the caller after this function.

    Args:
        project_dir: Directory to search for *ragdesk.yaml*. Defaults to CWD.
        global_config_path: Override the global config path (for testing).

    Raises:
        ConfigError: If global config contains API-key-like fields, or a value
            is out of range.
    """
    global_path = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    search_dir = project_dir if project_dir is not None else Path.cwd()

    merged: dict[str, Any] = {}

    # Layer 1: global config
    if global_path.exists():
        raw_global = yaml.safe_load(global_path.read_text(encoding="utf-8")) or {}
        _check_no_api_keys(raw_global, global_path)
        _warn_unknown_keys(raw_global, global_path)
        merged = _deep_merge(merged, raw_global)

    # Layer 2: per-project config
    project_cfg_path = search_dir / _PROJECT_CONFIG_NAME
    if project_cfg_path.exists():
        raw_project = yaml.safe_load(project_cfg_path.read_text(encoding="utf-8")) or {}
        _warn_unknown_keys(raw_project, project_cfg_path)
        merged = _deep_merge(merged, raw_project)

    cfg = _cfg_from_dict(merged)

    # Layer 3: env var overrides
    cfg = _apply_env_overrides(cfg)
    _validate(cfg)

    return cfg


def ensure_global_config(
    global_config_path: Path | None = None,
) -> Path:
    """Create ``~/.ragdesk/config.yaml`` with defaults if it does not exist.

    Creates parent directory with mode 0o700 and the config file with
    mode 0o600 (owner-readable only).

    Returns:
        Path to the global config file.
    """
    target = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    target.parent.mkdir(mode=0o700, parents=True, exist_ok=True)

    if not target.exists():
        content = (
            "# ragdesk global configuration: model defaults only.\n"
            "# NEVER store API keys here; use environment variables:\n"
            "#   export GEMINI_API_KEY=...\n"
            "#   export OPENAI_API_KEY=sk-...\n"
            "\n"
            "embedding:\n"
            "  model: gemini/text-embedding-004\n"
            "\n"
            "generation:\n"
            "  model: gemini/gemini-1.5-flash\n"
        )
        target.write_text(content, encoding="utf-8")
        target.chmod(0o600)

    return target
