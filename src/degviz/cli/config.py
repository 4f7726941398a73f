"""
Configuration file support for the degviz CLI.

Supports YAML and JSON config files with CLI argument override. Keys mirror
the long CLI options (``alpha``, ``lfc``, ``lim``, ``title``, ...); the
PlotConfig field names ``significance_cutoff``, ``fold_change_cutoff`` and
``lfc_limits`` are accepted as aliases.

Example ``volcano.yaml``:

    input: cuffdiff_out/gene_exp.diff
    type: cuffdiff
    x: hESC
    y: iPS
    output: figures/volcano.pdf
    alpha: 0.01
    lfc: 2
    lim: [-6, 6]
    grid: false
    highlight: [SOX2, NANOG]
"""

import json
import logging
from argparse import Namespace
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

import yaml

logger = logging.getLogger(__name__)

# PlotConfig field name -> option name
ALIASES = {
    "significance_cutoff": "alpha",
    "fold_change_cutoff": "lfc",
    "lfc_limits": "lim",
}

# short option -> argparse dest
SHORT_TO_LONG = {
    "i": "input",
    "o": "output",
    "t": "type",
    "x": "x",
    "y": "y",
}


@dataclass
class ConfigSchema:
    """
    Configuration schema for the plot subcommands.

    Mirrors the CLI options; None means "not given in the file". Shapes are
    checked here, numeric ranges by the same argparse validators the command
    line uses (see degviz.cli.plot.validate_merged).
    """
    input: Optional[Path] = None
    output: Optional[Path] = None
    data_out: Optional[Path] = None
    type: Optional[str] = None
    x: Optional[str] = None
    y: Optional[str] = None
    comparison: Optional[List[str]] = None
    alpha: Optional[float] = None
    lfc: Optional[float] = None
    lim: Optional[List[float]] = None
    highlight: Optional[List[str]] = None
    title: Optional[bool] = None
    legend: Optional[bool] = None
    grid: Optional[bool] = None
    style: Optional[str] = None
    palette: Optional[str] = None
    dpi: Optional[int] = None

    def __post_init__(self):
        for name in ("input", "output", "data_out"):
            value = getattr(self, name)
            if value is not None:
                setattr(self, name, Path(value))
        for name in ("type", "x", "y", "style", "palette"):
            value = getattr(self, name)
            if value is not None:
                setattr(self, name, str(value))
        for name in ("title", "legend", "grid"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, bool):
                raise ValueError(f"Config key '{name}' must be true or false, got {value!r}")
        if self.comparison is not None:
            self.comparison = [str(c) for c in _pair("comparison", self.comparison)]
        if self.lim is not None:
            self.lim = _pair("lim", self.lim)
        if isinstance(self.highlight, str):
            self.highlight = [self.highlight]
        elif self.highlight is not None:
            self.highlight = [str(h) for h in self.highlight]

    @classmethod
    def keys(cls) -> List[str]:
        """Every key a config file may use, aliases included."""
        return sorted([f.name for f in fields(cls)] + list(ALIASES))

    @classmethod
    def from_dict(cls, config: Mapping[str, Any]) -> "ConfigSchema":
        """
        Build a schema from a loaded mapping.

        Raises:
            ValueError: On unknown keys, a key given under both its name and
                its alias, or a value of the wrong shape
        """
        names = {f.name for f in fields(cls)}
        unknown = sorted(set(config) - names - set(ALIASES))
        if unknown:
            raise ValueError(f"Unknown config keys: {unknown}. Known keys: {cls.keys()}")

        values: Dict[str, Any] = {}
        for key, value in config.items():
            name = ALIASES.get(key, key)
            if name in values:
                raise ValueError(f"Config key '{name}' is given twice (as '{key}' and an alias)")
            values[name] = value
        return cls(**values)

    def given(self) -> Iterator[Tuple[str, Any]]:
        """(dest, value) for every key the file set."""
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None:
                yield f.name, value


def _pair(name: str, value: Any) -> list:
    if isinstance(value, (str, bytes)) or not hasattr(value, "__len__") or len(value) != 2:
        raise ValueError(f"Config key '{name}' must be a list of two values, got {value!r}")
    return list(value)


def _read_yaml(f):
    try:
        return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in config file: {e}")


def _read_json(f):
    try:
        return json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file: {e}")


_READERS = {".yaml": _read_yaml, ".yml": _read_yaml, ".json": _read_json}


def load_config(config_path: Path) -> ConfigSchema:
    """
    Load a plot configuration from a YAML or JSON file.

    Parameters:
        config_path: Path to config file (.yaml, .yml, or .json)

    Returns:
        ConfigSchema with the values the file sets

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If the format is unsupported, the file does not parse,
            or its keys or values do not fit the schema

    Examples:
        >>> config = load_config(Path("volcano.yaml"))
        >>> config.alpha
        0.01
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    reader = _READERS.get(config_path.suffix.lower())
    if reader is None:
        raise ValueError(
            f"Unsupported config format: {config_path.suffix}. Use .yaml, .yml, or .json"
        )
    with open(config_path, 'r') as f:
        raw = reader(f)

    if raw is None:
        return ConfigSchema()
    if not isinstance(raw, dict):
        raise ValueError("Config file must contain a dictionary/mapping at top level")
    return ConfigSchema.from_dict(raw)


def explicit_dests(cli_args: Optional[List[str]]) -> set:
    """
    argparse dests the user set on the command line.

    ``--no-title`` style switches map to their positive dest (``title``).
    """
    explicit = set()
    for arg in cli_args or ():
        if arg.startswith('--'):
            name = arg[2:].split('=', 1)[0].replace('-', '_')
            if name.startswith('no_'):
                name = name[3:]
            explicit.add(name)
        elif arg.startswith('-') and len(arg) == 2 and arg[1] in SHORT_TO_LONG:
            explicit.add(SHORT_TO_LONG[arg[1]])
    return explicit


def merge_config_with_args(
    config: Union[ConfigSchema, Mapping[str, Any]],
    args: Namespace,
    cli_args: Optional[List[str]] = None,
) -> Namespace:
    """
    Merge config file values with CLI arguments.

    Priority (highest to lowest):
    1. Explicitly provided CLI arguments
    2. Config file values
    3. CLI argument defaults

    Options a subcommand does not have (e.g. ``lim`` for ``box``) are
    ignored with a debug message.

    Parameters:
        config: ConfigSchema from load_config(), or a plain mapping
        args: Parsed CLI arguments (argparse.Namespace)
        cli_args: Raw CLI arguments list (for detecting explicit values).
                  If None, assumes all args are defaults

    Returns:
        New Namespace with merged values
    """
    schema = config if isinstance(config, ConfigSchema) else ConfigSchema.from_dict(config)
    explicit = explicit_dests(cli_args)
    merged = Namespace(**vars(args))

    for dest, value in schema.given():
        if not hasattr(merged, dest):
            logger.debug(f"Config key '{dest}' does not apply to '{args.command}'")
        elif dest in explicit:
            logger.debug(f"--{dest.replace('_', '-')} given on the command line overrides config")
        else:
            setattr(merged, dest, value)

    return merged
