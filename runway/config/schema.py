# Runway Configuration Schema
# Pydantic models for runway.yaml validation

import posixpath
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator, model_validator

from runway.exceptions import ConfigError
from runway.utils.paths import expand_braces


class TargetType(str, Enum):
    """Kind of sync target."""

    LOCAL = "local"
    ROBLOX = "roblox"


class CodegenFormat(str, Enum):
    """Generated output formats."""

    JSON = "json"
    LUAU = "luau"
    TYPESCRIPT = "typescript"
    TYPESCRIPT_DECLARATION = "typescript-declaration"


STUDIO_CONTENT_DIRNAME = ".runway"

DEFAULT_ID_TEMPLATES = {
    TargetType.ROBLOX: "rbxassetid://{id}",
}


class TargetConfig(BaseModel):
    """A named sync destination."""

    model_config = ConfigDict(extra="forbid")

    type: TargetType = Field(description="Target type")
    key: Optional[str] = Field(
        default=None,
        description="Unique key used on the command line and in state files. Defaults to the type.",
    )
    cache_dir: str = Field(default=".runway", description="Local targets: cache directory, relative to the project")
    user_id: Optional[str] = Field(default=None, description="Roblox targets: owning user ID")
    group_id: Optional[str] = Field(default=None, description="Roblox targets: owning group ID")
    id_template: Optional[str] = Field(
        default=None,
        description="Format of generated IDs; '{id}' is replaced by the stored identifier",
    )
    concurrency: int = Field(default=4, ge=1, le=64, description="Maximum simultaneous adapter calls")

    @field_validator("user_id", "group_id", mode="before")
    @classmethod
    def coerce_ids(cls, v: object) -> Optional[str]:
        """Accept numeric IDs from YAML."""
        if v is None or v == "":
            return None
        return str(v)

    @field_validator("cache_dir")
    @classmethod
    def check_cache_dir(cls, v: str) -> str:
        """The cache lives inside the project."""
        v = v.strip()
        if v.startswith("/") or Path(v).is_absolute() or ".." in v.split("/"):
            raise ValueError("cache_dir must be relative to the project root")
        v = posixpath.normpath(v)
        if not v or v == ".":
            raise ValueError("cache_dir must not be empty")
        return v

    @model_validator(mode="after")
    def apply_defaults(self) -> "TargetConfig":
        """Default the key to the type and check the owner."""
        if not self.key:
            self.key = self.type.value
        if self.id_template is None:
            self.id_template = DEFAULT_ID_TEMPLATES.get(self.type)
        if self.id_template is not None and "{id}" not in self.id_template:
            raise ValueError("id_template must contain '{id}'")
        if self.user_id and self.group_id:
            raise ValueError("set at most one of user_id and group_id")
        return self


class InputConfig(BaseModel):
    """A glob selecting asset files, relative to the project root."""

    model_config = ConfigDict(extra="forbid")

    glob: str = Field(description="Glob pattern, '**' matches any number of directories")

    @field_validator("glob")
    @classmethod
    def check_relative(cls, v: str) -> str:
        """Globs are project-relative."""
        if not v.strip():
            raise ValueError("glob must not be empty")
        if v.startswith("/") or ".." in v.split("/"):
            raise ValueError("glob must be relative to the project root")
        expand_braces(v)
        return v


class CodegenConfig(BaseModel):
    """One generated output file."""

    model_config = ConfigDict(extra="forbid")

    format: CodegenFormat = Field(description="Output format")
    path: str = Field(description="Output path, relative to the project root")
    flatten: bool = Field(default=False, description="Emit a single-level table keyed by full path")
    strip_prefix: Optional[str] = Field(default=None, description="Path prefix removed from every key")
    strip_extension: bool = Field(default=False, description="Remove file extensions from keys")


class ProjectConfig(BaseModel):
    """Root configuration model for Runway."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(default="", description="Project name")
    targets: list[TargetConfig] = Field(min_length=1, description="Sync targets to choose from")
    inputs: list[InputConfig] = Field(default_factory=list, description="Globs selecting assets")
    exclude: list[str] = Field(default_factory=list, description="Globs excluded from every input")
    codegen: list[CodegenConfig] = Field(default_factory=list, description="Generated outputs")
    file_path: Optional[Path] = Field(default=None, exclude=True, description="Where this config was loaded from")

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        """The name becomes a directory in Studio's content folder."""
        v = v.strip()
        if v in (".", "..") or any(c in v for c in '/\\:'):
            raise ValueError("name must be usable as a directory name")
        return v

    @field_validator("exclude")
    @classmethod
    def check_exclude(cls, v: list[str]) -> list[str]:
        for pattern in v:
            expand_braces(pattern)
        return v

    @model_validator(mode="after")
    def check_unique_keys(self) -> "ProjectConfig":
        """Reject duplicate target keys."""
        keys = [target.key for target in self.targets]
        duplicates = sorted({key for key in keys if keys.count(key) > 1})
        if duplicates:
            raise ValueError(f"targets have duplicate keys: {', '.join(duplicates)}")
        return self

    @property
    def root(self) -> Path:
        """Directory that project-relative paths resolve against."""
        if self.file_path is None:
            return Path.cwd()
        return self.file_path.parent

    @property
    def globs(self) -> list[str]:
        """Input globs in declaration order."""
        return [input_config.glob for input_config in self.inputs]

    @property
    def content_name(self) -> str:
        """Directory name of the project under Studio's content folder."""
        return self.name or self.root.resolve().name or "project"

    @property
    def cache_dirs(self) -> list[str]:
        """Cache directories of all local targets, never treated as inputs."""
        return sorted({target.cache_dir for target in self.targets if target.type == TargetType.LOCAL})

    def id_template_for(self, target: TargetConfig) -> str:
        """
        Template turning a stored identifier into the value written by codegen.

        Local targets default to the project's directory in Studio's content
        folder, which links to the cache directory.
        """
        if target.id_template is not None:
            return target.id_template
        return f"rbxasset://{STUDIO_CONTENT_DIRNAME}/{self.content_name}/{{id}}"

    def format_id(self, target: TargetConfig, identifier: str) -> str:
        """Turn a stored identifier of a target into its generated value."""
        return self.id_template_for(target).replace("{id}", identifier)

    def target_keys(self) -> list[str]:
        """Keys of all configured targets."""
        return [target.key for target in self.targets if target.key]

    def get_target(self, key: str) -> TargetConfig:
        """
        Get a target by key.

        Raises:
            ConfigError: If no target has this key.
        """
        for target in self.targets:
            if target.key == key:
                return target
        known = ", ".join(self.target_keys()) or "none"
        raise ConfigError(f"Unknown target '{key}' (configured targets: {known})")


class CloudCredentials(BaseModel):
    """Credentials for a cloud target, supplied per invocation."""

    api_key: Optional[SecretStr] = None
    user_id: Optional[str] = None
    group_id: Optional[str] = None
