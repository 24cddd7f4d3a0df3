"""
Rule option models.

Each configurable rule declares a pydantic model for its options. Options are
validated when the configuration is loaded, so rules only ever see values
that passed type and range checks.
"""

from typing import Any, Dict, Literal, Mapping, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError

from .blank_runs import ThresholdPolicy


class ConfigError(ValueError):
    """Raised when configuration or rule options are invalid."""


class NoMultipleEmptyLinesOptions(BaseModel):
    """Options for ``style.no_multiple_empty_lines``."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    max: StrictInt = Field(ge=0)
    max_eof: Optional[StrictInt] = Field(default=None, ge=0, alias="maxEOF")
    max_bof: Optional[StrictInt] = Field(default=None, ge=0, alias="maxBOF")

    def to_policy(self) -> ThresholdPolicy:
        return ThresholdPolicy.resolve(self.max, max_bof=self.max_bof, max_eof=self.max_eof)


class EolLastOptions(BaseModel):
    """Options for ``style.eol_last``."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    mode: Literal["always", "never", "unix", "windows"] = "always"


OPTION_MODELS: Dict[str, Type[BaseModel]] = {
    "style.no_multiple_empty_lines": NoMultipleEmptyLinesOptions,
    "style.eol_last": EolLastOptions,
}

# Options applied when a rule has nothing configured
DEFAULT_OPTIONS: Dict[str, Dict[str, Any]] = {
    "style.no_multiple_empty_lines": {"max": 2},
    "style.eol_last": {"mode": "always"},
}


def parse_rule_options(rule_id: str, options: Optional[Mapping[str, Any]] = None) -> BaseModel:
    """
    Validate ``options`` for ``rule_id``.

    ``None`` means the rule is unconfigured and gets its defaults. A given
    mapping is validated as is, so ``{}`` fails for rules with required keys.

    Raises:
        ConfigError: unknown rule id or options failing validation
    """
    model = OPTION_MODELS.get(rule_id)
    if model is None:
        raise ConfigError(f"Rule '{rule_id}' takes no options")

    if options is None:
        options = DEFAULT_OPTIONS.get(rule_id, {})

    if not isinstance(options, Mapping):
        raise ConfigError(f"Options for '{rule_id}' must be a mapping, got {type(options).__name__}")

    try:
        return model.model_validate(dict(options))
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigError(f"Invalid options for '{rule_id}': {problems}") from e


def validate_rule_configs(rule_configs: Mapping[str, Any]) -> Dict[str, Dict[str, Any]]:
    """
    Validate every entry of ``rule_configs`` belonging to a rule with an
    options model. Entries for other rules are passed through untouched.

    Returns:
        rule_configs with validated entries normalised to plain dicts
    """
    validated: Dict[str, Dict[str, Any]] = {}
    for rule_id, options in (rule_configs or {}).items():
        if rule_id in OPTION_MODELS:
            model = parse_rule_options(rule_id, options)
            validated[rule_id] = model.model_dump(by_alias=True, exclude_none=True)
        else:
            validated[rule_id] = options
    return validated
