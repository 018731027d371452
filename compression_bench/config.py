"""Configuration loading utilities for the compression benchmark."""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigError


@dataclass(frozen=True)
class AlgorithmSpec:
    """One row of the algorithm table: display name and wire compressor id."""

    name: str
    compressor: str


DEFAULT_ALGORITHMS = (
    AlgorithmSpec("Snappy", "snappy"),
    AlgorithmSpec("Zlib", "zlib"),
    AlgorithmSpec("Zstd", "zstd"),
)


@dataclass
class DocumentConfig:
    """Composition of the synthetic test document."""

    repeated_sentence: str = "This is highly compressible repetitive text pattern. "
    repeat_count: int = 50000
    item_count: int = 5000
    binary_length: int = 300000
    seed: int = 42


@dataclass
class ConnectionConfig:
    """Where the backend lives and how runs are named inside it."""

    uri: str = "mongodb://localhost:27017"
    database: str = "compression_demo"
    app_name: str = "compression-demo"
    collection_prefix: str = "test_"


@dataclass
class ReportConfig:
    """Constants used by the network and cost projections."""

    network_transfers: int = 1000
    monthly_transfers: int = 1000000
    cost_per_gb: float = 0.09
    show_expected_results: bool = True


@dataclass
class BenchmarkConfig:
    """Complete benchmark configuration."""

    document: DocumentConfig = field(default_factory=DocumentConfig)
    connection: ConnectionConfig = field(default_factory=ConnectionConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    algorithms: List[AlgorithmSpec] = field(
        default_factory=lambda: list(DEFAULT_ALGORITHMS)
    )
    timeout_seconds: float = 30.0
    inter_run_delay_seconds: float = 0.1

    def validate(self) -> "BenchmarkConfig":
        """Raise ConfigError if any value is out of range."""
        if not self.algorithms:
            raise ConfigError("At least one algorithm must be configured")
        names = [a.name.lower() for a in self.algorithms]
        if len(set(names)) != len(names):
            raise ConfigError(f"Duplicate algorithm names: {names}")
        for count_name in ("repeat_count", "item_count", "binary_length"):
            if getattr(self.document, count_name) < 0:
                raise ConfigError(f"document.{count_name} must be >= 0")
        if self.document.seed < 0:
            raise ConfigError("document.seed must be >= 0")
        if self.timeout_seconds <= 0:
            raise ConfigError("timeout_seconds must be positive")
        if self.inter_run_delay_seconds < 0:
            raise ConfigError("inter_run_delay_seconds must be >= 0")
        if self.report.network_transfers <= 0 or self.report.monthly_transfers <= 0:
            raise ConfigError("Transfer counts must be positive")
        if self.report.cost_per_gb < 0:
            raise ConfigError("report.cost_per_gb must be >= 0")
        return self


def load_yaml_config(path: str) -> Dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        path: Path to the YAML configuration file

    Returns:
        Dictionary containing the parsed YAML configuration

    Raises:
        FileNotFoundError: If the config file does not exist
        yaml.YAMLError: If the YAML is malformed
    """
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def _check_type(value: Any, expected: type, key: str) -> None:
    """Raise ConfigError unless value fits the declared field type."""
    # bool is an int subclass; YAML "yes"/"true" must not pass as a count
    if expected is float:
        ok = isinstance(value, (int, float)) and not isinstance(value, bool)
    elif expected is int:
        ok = isinstance(value, int) and not isinstance(value, bool)
    else:
        ok = isinstance(value, expected)
    if not ok:
        raise ConfigError(
            f"{key} must be {expected.__name__}, got {type(value).__name__}: {value!r}"
        )


def _build_section(cls, values: Optional[Dict[str, Any]], section: str):
    """Build a config dataclass from a mapping, rejecting unknown keys and bad types."""
    if values is None:
        return cls()
    if not isinstance(values, dict):
        raise ConfigError(f"Section '{section}' must be a mapping")
    known = {f.name for f in fields(cls)}
    unknown = set(values) - known
    if unknown:
        raise ConfigError(f"Unknown keys in '{section}': {sorted(unknown)}")
    for f in fields(cls):
        if f.name in values:
            _check_type(values[f.name], f.type, f"{section}.{f.name}")
    return cls(**values)


def _parse_algorithms(raw: Any) -> List[AlgorithmSpec]:
    if raw is None:
        return list(DEFAULT_ALGORITHMS)
    if not isinstance(raw, list):
        raise ConfigError("'algorithms' must be a list")

    algorithms = []
    for entry in raw:
        if not isinstance(entry, dict) or "name" not in entry or "compressor" not in entry:
            raise ConfigError(
                f"Algorithm entries need 'name' and 'compressor', got: {entry!r}"
            )
        algorithms.append(AlgorithmSpec(str(entry["name"]), str(entry["compressor"]).lower()))
    return algorithms


def _number(data: Dict[str, Any], key: str, default: float) -> float:
    value = data.get(key, default)
    _check_type(value, float, key)
    return float(value)


def config_from_dict(data: Dict[str, Any]) -> BenchmarkConfig:
    """
    Build a BenchmarkConfig from a parsed YAML mapping.

    Missing sections and keys fall back to their defaults.
    """
    known = {"document", "connection", "report", "algorithms", "timeout_seconds",
             "inter_run_delay_seconds"}
    unknown = set(data) - known
    if unknown:
        raise ConfigError(f"Unknown top-level config keys: {sorted(unknown)}")

    try:
        config = BenchmarkConfig(
            document=_build_section(DocumentConfig, data.get("document"), "document"),
            connection=_build_section(ConnectionConfig, data.get("connection"), "connection"),
            report=_build_section(ReportConfig, data.get("report"), "report"),
            algorithms=_parse_algorithms(data.get("algorithms")),
            timeout_seconds=_number(data, "timeout_seconds", 30.0),
            inter_run_delay_seconds=_number(data, "inter_run_delay_seconds", 0.1),
        )
        return config.validate()
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid configuration value: {e}") from e


def load_config(path: Optional[str] = None) -> BenchmarkConfig:
    """
    Load the benchmark configuration.

    Args:
        path: Optional YAML file; None returns the built-in defaults

    Returns:
        Validated BenchmarkConfig
    """
    if path is None:
        return BenchmarkConfig().validate()

    if not Path(path).exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        data = load_yaml_config(path)
    except yaml.YAMLError as e:
        raise ConfigError(f"Malformed YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return config_from_dict(data)
