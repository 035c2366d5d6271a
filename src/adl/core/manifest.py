"""
Compiler configuration loaded from adl.toml.

    [compiler]
    backend = "graph"
    default_model = "gpt-4o-mini"
    statelog_host = "http://localhost:1065"
    log_level = "INFO"

    [graph]
    debug = false
"""

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "adl.toml"

BACKEND_NAMES = ("script", "graph")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class GraphConfig:
    """Execution-graph backend options."""

    debug: bool = False  # Graph runtime prints each transition


@dataclass
class CompilerConfig:
    """Compiler configuration."""

    backend: str = "script"  # "script" | "graph"
    default_model: str = "gpt-4o-mini"
    statelog_host: str = "http://localhost:1065"
    log_level: str = "WARNING"
    graph: GraphConfig = field(default_factory=GraphConfig)
    source: Path | None = None  # File the config was read from, if any


def find_config(start: Path) -> Path | None:
    """Look for adl.toml in `start` and its parents."""
    start = start.resolve()
    for directory in [start, *start.parents]:
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def _table(data: dict, name: str, path: Path) -> dict:
    value = data.get(name, {})
    if not isinstance(value, dict):
        raise ConfigError(f"[{name}] in {path} must be a table, got {type(value).__name__}")
    return value


def load_config(path: Path | None = None) -> CompilerConfig:
    """
    Load compiler configuration.

    Args:
        path: Explicit adl.toml path. When None, defaults are returned.

    Returns:
        CompilerConfig

    Raises:
        ConfigError: If the file is missing, malformed or has invalid values
    """
    if path is None:
        return CompilerConfig()

    path = Path(path)
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e.strerror or e}") from e
    except UnicodeDecodeError as e:
        raise ConfigError(f"Config file {path} is not valid UTF-8") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    compiler = _table(data, "compiler", path)
    graph_data = _table(data, "graph", path)

    config = CompilerConfig(
        backend=compiler.get("backend", "script"),
        default_model=compiler.get("default_model", "gpt-4o-mini"),
        statelog_host=compiler.get("statelog_host", "http://localhost:1065"),
        log_level=str(compiler.get("log_level", "WARNING")).upper(),
        graph=GraphConfig(debug=bool(graph_data.get("debug", False))),
        source=path,
    )

    if config.backend not in BACKEND_NAMES:
        raise ConfigError(
            f"Unknown backend '{config.backend}' in {path}. Available backends: "
            f"{list(BACKEND_NAMES)}"
        )
    if config.log_level not in LOG_LEVELS:
        raise ConfigError(f"Invalid log_level '{config.log_level}' in {path}")

    logger.debug("Loaded config from %s: backend=%s", path, config.backend)
    return config
