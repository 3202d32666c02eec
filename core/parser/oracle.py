"""
Compiler oracle: the external pawncc process.

The oracle is opaque to the engine. Given a target file, a working directory
and a flag list it produces two byte streams (diagnostic text on stderr,
structured records on stdout) and an exit status.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, List, Optional

from ..models.config import CompilerSettings

logger = logging.getLogger(__name__)


class OracleUnavailableError(Exception):
    """Raised when the compiler cannot be started"""
    pass


class OracleProtocol(ABC):
    """
    Interface for starting compiler invocations.

    ``spawn`` returns a process object exposing ``stdout`` and ``stderr``
    stream readers (``await read(n)`` returning ``b""`` at end of stream) and
    an awaitable ``wait()`` returning the exit code, as
    ``asyncio.subprocess.Process`` does.
    """

    @abstractmethod
    async def spawn(
        self,
        target_file: Path,
        cwd: Path,
        flags: List[str],
        settings: Optional[CompilerSettings] = None
    ) -> Any:
        """
        Start one compiler invocation.

        Args:
            settings: Compiler location for this invocation, the oracle's
                own settings when omitted

        Raises:
            OracleUnavailableError: If the compiler cannot be started
        """
        pass


class CompilerOracle(OracleProtocol):
    """Runs pawncc as an asyncio subprocess"""

    def __init__(self, settings: Optional[CompilerSettings] = None, enabled: bool = True):
        self.settings = settings or CompilerSettings()
        self.enabled = enabled

    def get_executable(self, settings: Optional[CompilerSettings] = None) -> Optional[Path]:
        return (settings or self.settings).executable_path

    def is_available(self) -> bool:
        """Check if the compiler can be started"""
        return self.enabled and self.settings.is_compiler_available()

    @staticmethod
    def build_arguments(target_file: Path, flags: List[str]) -> List[str]:
        return [str(target_file)] + list(flags)

    async def spawn(
        self,
        target_file: Path,
        cwd: Path,
        flags: List[str],
        settings: Optional[CompilerSettings] = None
    ) -> asyncio.subprocess.Process:
        if not self.enabled:
            raise OracleUnavailableError("Client provides no configuration, compiler disabled")

        executable = self.get_executable(settings)
        if executable is None:
            raise OracleUnavailableError("Compiler path is not configured")

        args = self.build_arguments(target_file, flags)
        logger.debug(f"Starting {executable} {' '.join(args)} in {cwd}")

        try:
            # Arguments are passed as a list, no shell involved
            return await asyncio.create_subprocess_exec(
                str(executable),
                *args,
                cwd=str(cwd),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE
            )
        except OSError as e:
            raise OracleUnavailableError(f"Failed to start {executable}: {e}") from e
