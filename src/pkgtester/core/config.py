"""Harness configuration."""

from __future__ import annotations

from enum import IntEnum
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)


class Verbosity(IntEnum):
    """Output verbosity, ordered from quietest to noisiest."""

    SILENT = 0
    NORMAL = 1
    VERBOSE = 2
    DEAFENING = 3

    @classmethod
    def parse(cls, value: Any) -> Verbosity:
        """Parse a verbosity flag value.

        Accepts a Verbosity, an int 0-3, a string of one digit 0-3,
        or a level name (case-insensitive). Anything else raises
        ValueError.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                pass
        elif isinstance(value, str):
            text = value.strip()
            if text.isdigit() and int(text) in cls._value2member_map_:
                return cls(int(text))
            try:
                return cls[text.upper()]
            except KeyError:
                pass
        raise ValueError(
            f"Can't parse verbosity {value!r}: expected 0-3 or one of "
            + ", ".join(v.name.lower() for v in cls)
        )

    @property
    def log_level(self) -> str:
        """Console log level used for this verbosity."""
        return {
            Verbosity.SILENT: "error",
            Verbosity.NORMAL: "info",
            Verbosity.VERBOSE: "debug",
            Verbosity.DEAFENING: "trace",
        }[self]


class TesterSettings(BaseSettings):
    """Settings for driving the build tool.

    Built once at start-up and handed to every component. Sources,
    highest priority first:
    1. Constructor arguments
    2. pkgtester.yaml in the current directory
    3. .env file
    4. Environment variables (VERBOSE, and PKGTESTER_* for the rest)
    """

    verbosity: Verbosity = Field(
        default=Verbosity.NORMAL,
        validation_alias=AliasChoices("verbosity", "VERBOSE"),
        description="0-3 or silent, normal, verbose, deafening",
    )
    ghc_path: str = Field(
        default="ghc",
        description="Compiler passed to 'configure -w' and used for Setup.hs",
    )
    ghc_pkg_path: str = Field(
        default="ghc-pkg",
        description="Package registry tool used by unregister",
    )
    setup_path: str = Field(
        default="Setup",
        description=(
            "Shared pre-built Setup driver, relative to the current "
            "directory"
        ),
    )
    package_db: Path = Field(
        default=Path("../dist/package.conf.inplace"),
        description=(
            "In-place package database used when compiling Setup.hs, "
            "relative to the current directory"
        ),
    )
    log_name: str = Field(
        default="test-log.txt",
        description="Transcript file written inside each package directory",
    )
    log_file: Path | None = Field(
        default=None,
        description="Optional file receiving the harness's own log",
    )

    model_config = SettingsConfigDict(
        yaml_file="pkgtester.yaml",
        env_file=".env",
        env_prefix="PKGTESTER_",
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("verbosity", mode="before")
    @classmethod
    def _parse_verbosity(cls, value: Any) -> Verbosity:
        return Verbosity.parse(value)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            YamlConfigSettingsSource(settings_cls),
            dotenv_settings,
            env_settings,
            file_secret_settings,
        )


__all__ = ["TesterSettings", "Verbosity"]
