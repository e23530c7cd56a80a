"""
Pydantic-based schema validation for codemend configuration (codemend.yaml / [tool.codemend]).

Goals
- Catch unknown or misspelled keys early (top-level and per-rule options)
- Enforce proper types for the fields the engine reads
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class VersionIdCheckOptions(BaseModel):
    model_config = ConfigDict(extra="forbid")
    target_version: Optional[Union[int, str]] = None
    constant_name: Optional[str] = None


class ExtraArgumentsOptions(BaseModel):
    model_config = ConfigDict(extra="forbid")


RULE_OPTION_MODELS: Dict[str, type] = {
    "remove_version_id_check": VersionIdCheckOptions,
    "remove_extra_arguments": ExtraArgumentsOptions,
}


class CodemendConfigModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    version: Optional[str] = None
    paths: List[str] = Field(default_factory=list)
    include: List[str] = Field(default_factory=list)
    exclude: List[str] = Field(default_factory=list)
    output: Optional[str] = None
    report: Optional[bool] = None
    rules: Optional[Union[List[str], Dict[str, Optional[Dict[str, Any]]]]] = None


class ConfigError(ValueError):
    """Raised when a configuration file does not match the schema."""


def validate_config_data(data: Dict[str, Any]) -> None:
    """Validate loaded configuration data.

    Raises:
        ConfigError: with every problem found, one per line.
    """
    problems: List[str] = []
    try:
        model = CodemendConfigModel.model_validate(data)
    except ValidationError as e:
        raise ConfigError(_format_errors(e)) from None

    rules = model.rules
    if isinstance(rules, list):
        rules = {name: None for name in rules}
    for name, options in (rules or {}).items():
        option_model = RULE_OPTION_MODELS.get(name)
        if option_model is None:
            problems.append(f"rules.{name}: unknown rule")
            continue
        try:
            option_model.model_validate(options or {})
        except ValidationError as e:
            problems.append(_format_errors(e, prefix=f"rules.{name}"))
    if problems:
        raise ConfigError("\n".join(problems))


def _format_errors(error: ValidationError, prefix: str = "") -> str:
    lines = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        where = ".".join(p for p in (prefix, loc) if p)
        lines.append(f"{where or '<root>'}: {err.get('msg')}")
    return "\n".join(lines)
