"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use BLADEC_ prefix (e.g., BLADEC_CACHE_PATH=/tmp/views).

Settings can also be loaded from a .env file in the project root.
"""

import re
from pathlib import PurePath

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use BLADEC_ prefix.

    Examples:
        BLADEC_CACHE_PATH=storage/views
        BLADEC_COMPILED_EXTENSION=.php
        BLADEC_DEBUG_MODE=true
    """

    model_config = SettingsConfigDict(
        env_prefix="BLADEC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Cache configuration
    cache_path: str = Field(
        default="storage/views",
        description="Directory where compiled templates are written",
    )

    compiled_extension: str = Field(
        default=".php",
        description="File extension of compiled templates (also used by cache clearing)",
    )

    # Template discovery
    template_suffix: str = Field(
        default=".blade.php",
        description="Suffix stripped from template file names to form logical names",
    )

    template_glob: str = Field(
        default="**/*.blade.php",
        description="Glob used by the CLI to discover templates under inputdir",
    )

    # Block preservation placeholders
    verbatim_prefix: str = Field(
        default="__VERBATIM_BLOCK_",
        description="Prefix for preserved @verbatim block placeholders",
    )

    raw_prefix: str = Field(
        default="__RAW_BLOCK_",
        description="Prefix for preserved @php ... @endphp block placeholders",
    )

    block_suffix: str = Field(
        default="__",
        description="Suffix shared by all preserved block placeholders",
    )

    debug_mode: bool = Field(
        default=False,
        description="Enable debug output during compilation",
    )

    def verbatimToken_make(self, index: int) -> str:
        """
        Generate a placeholder for a preserved verbatim block.

        Example:
            >>> AppSettings().verbatimToken_make(0)
            '__VERBATIM_BLOCK_0__'
        """
        return f"{self.verbatim_prefix}{index}{self.block_suffix}"

    def rawToken_make(self, index: int) -> str:
        """
        Generate a placeholder for a preserved raw PHP block.

        Example:
            >>> AppSettings().rawToken_make(3)
            '__RAW_BLOCK_3__'
        """
        return f"{self.raw_prefix}{index}{self.block_suffix}"

    def blockToken_pattern(self) -> "re.Pattern[str]":
        """
        Compiled regex matching any preserved block placeholder.

        Used to decide whether a component slot still carries preserved
        content (which must be evaluated at render time).
        """
        prefixes = "|".join(re.escape(p) for p in (self.verbatim_prefix, self.raw_prefix))
        return re.compile(rf"(?:{prefixes})\d+{re.escape(self.block_suffix)}")

    def templateName_make(self, relative_path: PurePath | str) -> str:
        """
        Derive a logical (dotted) template name from a path relative to the
        template root.

        Example:
            >>> AppSettings().templateName_make('layouts/app.blade.php')
            'layouts.app'
        """
        path = PurePath(relative_path).as_posix()
        if self.template_suffix and path.endswith(self.template_suffix):
            path = path[: -len(self.template_suffix)]
        return path.replace("/", ".")


# Singleton instance - import this in your code
appsettings = AppSettings()
