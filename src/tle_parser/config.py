"""
Parser profiles and YAML-backed parser configuration.

Profiles bundle ParseOptions for common situations (strict archival checks,
lenient real-time feeds, provider quirks). A YAML file can pick a profile and
override individual options:

    profile: permissive
    options:
      include_comments: false
"""

from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Literal, Optional
import logging
import os

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator

from .models import ParsedTLE, ValidationMode
from .parser import ParseOptions, parse_tle

logger = logging.getLogger(__name__)

PROFILES: Dict[str, ParseOptions] = {
    # Parser presets
    "strict": ParseOptions(
        strict_checksums=True,
        validate_ranges=True,
        mode=ValidationMode.STRICT,
        include_warnings=True,
        include_comments=True,
    ),
    "permissive": ParseOptions(
        strict_checksums=False,
        validate_ranges=False,
        mode=ValidationMode.PERMISSIVE,
        include_warnings=True,
        include_comments=True,
    ),
    "fast": ParseOptions(validate=False, include_warnings=False, include_comments=False),
    "realtime": ParseOptions(
        strict_checksums=False,
        validate_ranges=False,
        mode=ValidationMode.PERMISSIVE,
        include_warnings=False,
        include_comments=False,
    ),
    "batch": ParseOptions(
        strict_checksums=True,
        validate_ranges=True,
        mode=ValidationMode.STRICT,
        include_warnings=False,
        include_comments=False,
    ),
    "recovery": ParseOptions(validate=False, include_warnings=True, include_comments=True),
    "legacy": ParseOptions(
        strict_checksums=False,
        validate_ranges=False,
        mode=ValidationMode.PERMISSIVE,
        include_warnings=True,
        include_comments=True,
    ),
    # Data providers
    "celestrak": ParseOptions(mode=ValidationMode.STRICT, include_comments=True),
    "spacetrack": ParseOptions(mode=ValidationMode.STRICT, include_comments=True),
    "amsat": ParseOptions(
        strict_checksums=False,
        validate_ranges=False,
        mode=ValidationMode.PERMISSIVE,
        include_warnings=True,
        include_comments=True,
    ),
    "custom": ParseOptions(validate=False, include_warnings=True, include_comments=True),
}

def get_profile_options(profile: str) -> ParseOptions:
    """
    Get parser options for a named profile.

    Args:
        profile: Profile name (see PROFILES)

    Returns:
        A fresh ParseOptions instance

    Raises:
        ValueError: If the profile is unknown
    """
    try:
        return replace(PROFILES[profile])
    except KeyError:
        raise ValueError(
            f"Unknown parser profile '{profile}'. Available: {', '.join(sorted(PROFILES))}"
        ) from None


def parse_with_profile(tle_string: str, profile: str) -> ParsedTLE:
    """Parse a TLE using the options of a named profile."""
    return parse_tle(tle_string, get_profile_options(profile))


class ParserOptionOverrides(BaseModel):
    """
    Option overrides of a configuration document.

    Booleans must be YAML booleans; quoted strings such as "false" are
    rejected. Only keys present in the document override the profile.
    """

    model_config = ConfigDict(extra="forbid")

    # "validate" would shadow BaseModel.validate
    run_validation: StrictBool = Field(default=True, alias="validate")
    strict_checksums: StrictBool = True
    validate_ranges: StrictBool = True
    include_warnings: StrictBool = True
    include_comments: StrictBool = True
    mode: Literal["strict", "permissive"] = "strict"
    reference_time: Optional[datetime] = None

    def as_overrides(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True)


class ParserConfigFile(BaseModel):
    """Schema of a parser configuration document."""

    model_config = ConfigDict(extra="forbid")

    profile: str = "strict"
    options: ParserOptionOverrides = Field(default_factory=ParserOptionOverrides)

    @field_validator("profile")
    @classmethod
    def validate_profile(cls, v: str) -> str:
        if v not in PROFILES:
            raise ValueError(f"profile must be one of {sorted(PROFILES)}, got '{v}'")
        return v

    def to_parse_options(self) -> ParseOptions:
        return replace(get_profile_options(self.profile), **self.options.as_overrides())


def get_default_config_path() -> str:
    """Get default configuration file path"""
    env_path = os.environ.get("TLE_PARSER_CONFIG")
    if env_path:
        return env_path
    project_root = Path(__file__).resolve().parents[2]
    return str(project_root / "config" / "tle_parser.yaml")


def load_options(config_path: Optional[str] = None) -> ParseOptions:
    """
    Load parser options from a YAML configuration file.

    Args:
        config_path: Path to the YAML file (default: TLE_PARSER_CONFIG or
            config/tle_parser.yaml)

    Returns:
        ParseOptions built from the file's profile and option overrides, or
        the defaults when the file does not exist

    Raises:
        ValueError: If the file is not valid YAML or fails validation
    """
    path = config_path or get_default_config_path()
    if not os.path.exists(path):
        logger.warning(f"Configuration file not found: {path}")
        return ParseOptions()

    try:
        with open(path, "r") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError(f"Configuration in {path} must be a mapping, got {type(raw).__name__}")

    try:
        config = ParserConfigFile(**raw)
        options = config.to_parse_options()
    except ValueError as e:
        raise ValueError(f"Invalid parser configuration in {path}: {e}") from e

    logger.debug(f"Loaded parser options from {path} (profile '{config.profile}')")
    return options
