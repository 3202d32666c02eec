"""
Default configuration values for pawn-context.

Centralized defaults that can be overridden by environment variables or
per-workspace config files.
"""

import os
from typing import Dict, List, Any

# Flag that makes pawncc emit structured records on stdout
DIAGNOSTICS_FLAG = "-R"

DEFAULT_COMPILE_OPTIONS: List[str] = ["-d0", "-O3"]

# Workspace entry point discovery: the workspace directory name is tried
# first, then these names, each against the extensions in order
MAIN_FILE_CANDIDATE_NAMES: List[str] = ["main"]
MAIN_FILE_EXTENSIONS: List[str] = [".pwn", ".p", ".inc"]

# Per-workspace configuration location
WORKSPACE_CONFIG_DIR = ".pawn-context"
WORKSPACE_CONFIG_FILE = "config.json"

# Bytes read from the compiler streams per call
READ_CHUNK_SIZE = 64 * 1024

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Global default settings
DEFAULT_SETTINGS = {
    "compiler": {
        "path": None,
        "executable": "pawncc.exe" if os.name == "nt" else "pawncc",
        "options": DEFAULT_COMPILE_OPTIONS,
        "main_file": ""
    },

    "parser": {
        "diagnostics_flag": DIAGNOSTICS_FLAG,
        "read_chunk_size": READ_CHUNK_SIZE
    },

    "workspace": {
        "main_file_candidates": MAIN_FILE_CANDIDATE_NAMES,
        "main_file_extensions": MAIN_FILE_EXTENSIONS,
        "config_dir": WORKSPACE_CONFIG_DIR,
        "config_file": WORKSPACE_CONFIG_FILE
    },

    "logging": {
        "level": "INFO",
        "format": LOG_FORMAT
    }
}

# Environment variable mappings onto CompilerSettings fields
ENV_VAR_MAPPING = {
    'PAWN_CONTEXT_COMPILER_PATH': 'path',
    'PAWN_CONTEXT_COMPILER_EXECUTABLE': 'executable',
    'PAWN_CONTEXT_COMPILER_OPTIONS': 'options',
    'PAWN_CONTEXT_MAIN_FILE': 'main_file'
}


def get_default_compiler_config() -> Dict[str, Any]:
    """Get default compiler configuration template"""
    compiler = DEFAULT_SETTINGS['compiler']
    return {
        'path': compiler['path'],
        'executable': compiler['executable'],
        'options': list(compiler['options']),
        'main_file': compiler['main_file']
    }
