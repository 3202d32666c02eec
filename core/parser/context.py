"""
Parser context: one compiler invocation lifecycle for one root path.

A context is keyed by a workspace root or by a single standalone file. It
runs at most one compiler invocation at a time, buffers its output, feeds
the result demultiplexer and releases everyone waiting on the invocation
once the sinks are fully replaced.
"""

import asyncio
import logging
import time
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from config.defaults import DIAGNOSTICS_FLAG, READ_CHUNK_SIZE
from ..models.config import CompilerSettings
from ..symbols import DiagnosticList, SymbolTable
from .demux import ResultDemultiplexer
from .error_recovery import OutputRecovery
from .oracle import CompilerOracle, OracleProtocol, OracleUnavailableError

logger = logging.getLogger(__name__)

OnWorkspaceParsed = Callable[["ParserContext"], Awaitable[Any]]


class ParserContext:
    """
    Owner of compiler invocations and their results for one root path.

    State machine is Idle -> Running -> Idle. ``run()`` while Running is
    dropped, there is no cancellation; the only way to affect a running
    invocation is to wait for it.
    """

    def __init__(
        self,
        root_path: Union[str, Path],
        is_workspace: bool = False,
        *,
        settings: Optional[CompilerSettings] = None,
        oracle: Optional[OracleProtocol] = None,
        on_workspace_parsed: Optional[OnWorkspaceParsed] = None
    ):
        self.root_path = Path(root_path)
        self.main_file = ""
        self.settings = settings or CompilerSettings()
        self.oracle = oracle or CompilerOracle(self.settings)

        # Sinks, replaced wholesale by every completed invocation
        self.symbols = SymbolTable()
        self.diagnostics = DiagnosticList()

        self._workspace = is_workspace
        self._on_workspace_parsed = on_workspace_parsed

        # Invocation state
        self._progress_count = 0
        self._output = bytearray()
        self._waiters: List[asyncio.Future] = []
        self._task: Optional[asyncio.Task] = None

        # Statistics
        self.runs_completed = 0
        self.last_exit_code: Optional[int] = None
        self.last_parse_time = 0.0

    def run(self) -> Optional[asyncio.Task]:
        """
        Start a compiler invocation.

        Returns:
            The invocation task, or None when the request was dropped
            (already running, or a workspace without a main file)
        """
        if self.is_in_progress():
            logger.debug(f"Parser for {self.root_path} already running, run request dropped")
            return None

        if self._workspace and not self.main_file:
            return None

        loop = asyncio.get_running_loop()

        self._progress_count += 1
        self._output.clear()

        self._task = loop.create_task(self._invoke())
        return self._task

    def get_target_file(self) -> Path:
        """File handed to the compiler"""
        if self._workspace:
            return self.root_path / self.main_file
        return self.root_path

    async def _invoke(self) -> None:
        target_file = self.get_target_file()
        flags = list(self.settings.options) + [DIAGNOSTICS_FLAG]
        start_time = time.perf_counter()

        try:
            try:
                process = await self.oracle.spawn(
                    target_file, self.root_path.parent, flags, settings=self.settings
                )
            except (OracleUnavailableError, OSError) as e:
                logger.error(f"Parser spawn error for {target_file}: {e}")
                return

            await asyncio.gather(
                self._pump_stderr(process.stderr),
                self._pump_stdout(process.stdout)
            )
            exit_code = await process.wait()

            self._ingest_output(exit_code, time.perf_counter() - start_time)
        finally:
            self._release_waiters()

        if self._workspace and self._on_workspace_parsed is not None:
            await self._on_workspace_parsed(self)

    async def _pump_stderr(self, stream) -> None:
        if stream is None:
            return

        while True:
            chunk = await stream.read(READ_CHUNK_SIZE)
            if not chunk:
                break
            logger.info(chunk.decode('utf-8', errors='replace').rstrip())

    async def _pump_stdout(self, stream) -> None:
        if stream is None:
            return

        while True:
            chunk = await stream.read(READ_CHUNK_SIZE)
            if not chunk:
                break
            self._output += OutputRecovery.strip_carriage_returns(chunk)

    def _ingest_output(self, exit_code: Optional[int], elapsed: float) -> None:
        text, _ = OutputRecovery.decode(bytes(self._output))
        self._output.clear()

        result = ResultDemultiplexer(self.symbols, self.diagnostics).ingest(text)

        for diagnostic in self.diagnostics:
            logger.info(diagnostic.detail)

        self.runs_completed += 1
        self.last_exit_code = exit_code
        self.last_parse_time = elapsed

        logger.info(
            f"Path \"{self.root_path}\" parsing end: {result.records} records, "
            f"{result.skipped} skipped, exit code {exit_code}"
        )

    def _release_waiters(self) -> None:
        # Clamped, never negative
        self._progress_count = max(self._progress_count - 1, 0)

        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(None)

    async def wait_for_result(self) -> None:
        """Wait for the running invocation, if any, to finish"""
        if not self.is_in_progress():
            return

        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        await waiter

    def set_main_file(self, file: str, reparse: bool = True) -> Optional[asyncio.Task]:
        """
        Change what a workspace context compiles.

        No-op for standalone contexts. With ``reparse`` the symbols are
        cleared immediately and a new invocation is requested.
        """
        if not self._workspace:
            return None

        self.main_file = file or ""

        if reparse:
            self.symbols.clear()
            return self.run()

        return None

    @property
    def task(self) -> Optional[asyncio.Task]:
        """Most recent invocation task"""
        return self._task

    def get_root_path(self) -> Path:
        return self.root_path

    def get_main_file(self) -> str:
        return self.main_file

    def is_in_progress(self) -> bool:
        return self._progress_count > 0

    def is_workspace_scoped(self) -> bool:
        return self._workspace

    def get_stats(self) -> Dict[str, Any]:
        """Get context statistics"""
        return {
            "root_path": str(self.root_path),
            "main_file": self.main_file,
            "workspace": self._workspace,
            "in_progress": self.is_in_progress(),
            "runs_completed": self.runs_completed,
            "last_exit_code": self.last_exit_code,
            "last_parse_time_ms": self.last_parse_time * 1000,
            "symbols": self.symbols.get_counts(),
            "diagnostics": len(self.diagnostics)
        }

    def __repr__(self) -> str:
        kind = "workspace" if self._workspace else "standalone"
        return f"ParserContext({str(self.root_path)!r}, {kind}, main_file={self.main_file!r})"
