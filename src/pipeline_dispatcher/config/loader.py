"""
Configuration Loader - YAML Loading with Validation.

Reads dispatcher YAML, optionally overlays a named profile from
``config/profiles/<name>.yaml`` and validates the result against
DispatcherConfig. Values tagged ``!expr`` become expression markers:

    with:
      value: !expr input.name + "!"
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, Any, Dict, Optional, Union

import yaml

from pipeline_dispatcher.config.models import DispatcherConfig
from pipeline_dispatcher.domain.errors import ConfigurationError
from pipeline_dispatcher.expression.values import ExpressionRef

logger = logging.getLogger(__name__)

EXPR_TAG = "!expr"
PROFILE_DIR = Path("config") / "profiles"

PathLike = Union[str, Path]


class ConfigYamlLoader(yaml.SafeLoader):
    """SafeLoader plus the ``!expr`` scalar tag."""


def _expression_constructor(loader: yaml.SafeLoader, node: yaml.Node) -> ExpressionRef:
    if isinstance(node, yaml.ScalarNode):
        return ExpressionRef(str(loader.construct_scalar(node)))
    raise yaml.constructor.ConstructorError(
        None, None, f"{EXPR_TAG} expects a scalar, got {node.id}", node.start_mark
    )


ConfigYamlLoader.add_constructor(EXPR_TAG, _expression_constructor)


def read_yaml(source: Union[str, IO[str]]) -> Dict[str, Any]:
    """
    Parse YAML text or a stream into a mapping.

    An empty document yields ``{}``.

    Raises:
        yaml.YAMLError: Malformed YAML or a non-scalar ``!expr``
        ConfigurationError: The document root is not a mapping
    """
    data = yaml.load(source, Loader=ConfigYamlLoader)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            "Configuration root must be a mapping",
            [f"got {type(data).__name__}"],
        )
    return data


def deep_merge(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """Nested mappings merge key by key; any other overlay value replaces."""
    merged = dict(base)
    for key, value in overlay.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


class ConfigLoader:
    """Loads DispatcherConfig from files, strings or dictionaries."""

    def __init__(self, base_path: Optional[Path] = None) -> None:
        """
        Args:
            base_path: Directory relative config paths and the profile
                directory are resolved against (current directory if None)
        """
        self._base_path = Path(base_path) if base_path is not None else Path(".")

    def load(self, config_path: PathLike, profile: Optional[str] = None) -> DispatcherConfig:
        """
        Load, overlay and validate a YAML configuration file.

        Args:
            config_path: File path, absolute or relative to base_path
            profile: Profile name merged over the file's contents

        Returns:
            Validated DispatcherConfig

        Raises:
            FileNotFoundError: Config file or profile missing
            yaml.YAMLError: Malformed YAML
            pydantic.ValidationError: Schema violations
        """
        raw = self._read_file(self._resolve(config_path))

        if profile:
            raw = deep_merge(raw, self._read_profile(profile))
            logger.info(f"Applied config profile '{profile}'")

        return DispatcherConfig.model_validate(raw)

    def load_from_dict(self, config_dict: Dict[str, Any]) -> DispatcherConfig:
        return DispatcherConfig.model_validate(config_dict)

    def load_from_string(self, text: str) -> DispatcherConfig:
        return DispatcherConfig.model_validate(read_yaml(text))

    def _resolve(self, path: PathLike) -> Path:
        candidate = Path(path)
        return candidate if candidate.is_absolute() else self._base_path / candidate

    def _read_profile(self, profile: str) -> Dict[str, Any]:
        path = self._base_path / PROFILE_DIR / f"{profile}.yaml"
        if not path.is_file():
            raise FileNotFoundError(f"Profile not found: {profile} ({path})")
        return self._read_file(path)

    @staticmethod
    def _read_file(path: Path) -> Dict[str, Any]:
        logger.debug(f"Reading configuration from {path}")
        with path.open(encoding="utf-8") as stream:
            return read_yaml(stream)


def load_config(
    config_path: PathLike,
    profile: Optional[str] = None,
    base_path: Optional[Path] = None,
) -> DispatcherConfig:
    """Shortcut for ``ConfigLoader(base_path).load(config_path, profile)``."""
    return ConfigLoader(base_path=base_path).load(config_path, profile)
