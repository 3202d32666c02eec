"""
Configuration models for pawn-context.

Handles compiler settings, client capabilities and workspace descriptors.
"""

import os
import shlex
from pathlib import Path
from typing import Any, List, Optional
from urllib.parse import urlparse
from urllib.request import url2pathname
from pydantic import BaseModel, Field, ConfigDict, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def default_executable_name() -> str:
    """Compiler executable name for the current platform"""
    return "pawncc.exe" if os.name == "nt" else "pawncc"


def split_options(value: Any) -> Any:
    """Accept compiler options as a list or as a shell-style string"""
    if isinstance(value, str):
        return shlex.split(value)
    return value


class CompilerSettings(BaseModel):
    """Compiler invocation settings"""
    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True
    )

    # Directory holding the compiler executable
    path: Optional[Path] = None
    executable: str = Field(default_factory=default_executable_name)

    # Flags passed before the diagnostics flag
    options: List[str] = Field(default_factory=lambda: ["-d0", "-O3"])

    # Preferred workspace entry point, relative to the workspace root
    main_file: str = ""

    @field_validator('options', mode='before')
    @classmethod
    def validate_options(cls, v: Any) -> Any:
        """Split string options"""
        return split_options(v)

    @field_validator('executable')
    @classmethod
    def validate_executable(cls, v: str) -> str:
        """Executable must be a bare file name"""
        if not v:
            raise ValueError('Compiler executable name cannot be empty')
        if '/' in v or '\\' in v:
            raise ValueError('Compiler executable must be a file name, not a path')
        return v

    @field_validator('main_file')
    @classmethod
    def validate_main_file(cls, v: str) -> str:
        """Main file is relative to the workspace root"""
        if v and Path(v).is_absolute():
            raise ValueError('Main file must be relative to the workspace root')
        return v

    @property
    def executable_path(self) -> Optional[Path]:
        """Full path to the compiler executable, if configured"""
        if self.path is None:
            return None
        return self.path / self.executable

    def is_compiler_available(self) -> bool:
        """Check that the configured compiler exists"""
        executable = self.executable_path
        return executable is not None and executable.is_file()


class ClientCapabilities(BaseModel):
    """Capabilities announced by the editor client"""
    model_config = ConfigDict(validate_assignment=True)

    # Client reports workspace folders; without it every file is standalone
    workspace_folders: bool = True

    # Client provides configuration; without it the compiler is never started
    configuration: bool = True


class WorkspaceFolder(BaseModel):
    """Workspace folder descriptor as announced by the editor"""
    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True
    )

    uri: str
    name: str = ""

    @field_validator('uri')
    @classmethod
    def validate_uri(cls, v: str) -> str:
        """Only local folders can be compiled"""
        if not v:
            raise ValueError('Workspace URI cannot be empty')
        scheme = urlparse(v).scheme
        # One-letter schemes are Windows drive letters
        if len(scheme) > 1 and scheme != 'file':
            raise ValueError(f'Unsupported workspace URI scheme: {scheme}')
        return v

    @property
    def path(self) -> Path:
        """Filesystem path of the folder"""
        parsed = urlparse(self.uri)
        if parsed.scheme == 'file':
            return Path(url2pathname(parsed.path))
        return Path(self.uri)

    @classmethod
    def from_path(cls, path) -> 'WorkspaceFolder':
        """Create a descriptor for a local directory"""
        folder = Path(path).absolute()
        return cls(uri=folder.as_uri(), name=folder.name)


class GlobalSettings(BaseSettings):
    """Process-wide settings with environment variable support"""
    model_config = SettingsConfigDict(
        env_prefix="PAWN_CONTEXT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    compiler_path: Optional[Path] = None
    compiler_executable: str = Field(default_factory=default_executable_name)

    # Shell-style string so the environment value needs no JSON quoting
    compiler_options: str = "-d0 -O3"
    main_file: str = ""

    # Logging
    log_level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")

    @field_validator('log_level', mode='before')
    @classmethod
    def validate_log_level(cls, v: Any) -> Any:
        """Log level names are case insensitive"""
        if isinstance(v, str):
            return v.upper()
        return v

    def to_compiler_settings(self) -> CompilerSettings:
        """Build compiler settings from the global values"""
        return CompilerSettings(
            path=self.compiler_path,
            executable=self.compiler_executable,
            options=self.compiler_options,
            main_file=self.main_file
        )
