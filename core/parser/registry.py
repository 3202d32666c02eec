"""
Parser registry: routing of file paths to parser contexts.

Provides the process-wide table of parser contexts. Workspace contexts are
created eagerly for configured workspace folders; standalone contexts are
created lazily for any other queried file. Resolution maps a file path to
the context that owns it, which for files included by a workspace's main
file is only known once that workspace has been compiled.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union

from config.defaults import MAIN_FILE_CANDIDATE_NAMES, MAIN_FILE_EXTENSIONS
from config.loader import ConfigurationLoader
from ..models.config import ClientCapabilities, CompilerSettings, WorkspaceFolder
from .context import ParserContext
from .oracle import CompilerOracle, OracleProtocol

logger = logging.getLogger(__name__)


def _is_within(path: Path, root: Path) -> bool:
    return path == root or root in path.parents


class ParserRegistry:
    """
    Registry of parser contexts keyed by path.

    Constructed once per process and handed to its callers. All mutation of
    the context and workspace tables goes through the methods below; they
    run on a single event loop, so the tables need no lock. Iterations that
    span an ``await`` work on a snapshot and re-check membership afterwards.
    """

    def __init__(
        self,
        settings: Optional[CompilerSettings] = None,
        capabilities: Optional[ClientCapabilities] = None,
        oracle: Optional[OracleProtocol] = None,
        config_loader: Optional[ConfigurationLoader] = None
    ):
        self.settings = settings or CompilerSettings()
        self.capabilities = capabilities or ClientCapabilities()
        self.oracle = oracle or CompilerOracle(self.settings, enabled=self.capabilities.configuration)
        self.config_loader = config_loader

        self._contexts: Dict[Path, ParserContext] = {}
        self._workspaces: Dict[Path, WorkspaceFolder] = {}
        self._workspaces_initialized = False

    def init(self, workspaces: Iterable[WorkspaceFolder] = ()) -> None:
        """
        Register the workspaces known at startup.

        Must be called from a running event loop, see
        create_workspace_contexts().
        """
        self.create_workspace_contexts(workspaces)

    async def shutdown(self) -> None:
        """Wait for in-flight invocations, then drop every context"""
        tasks = [
            context.task for context in list(self._contexts.values())
            if context.task is not None and not context.task.done()
        ]
        if tasks:
            logger.info(f"Waiting for {len(tasks)} running parsers before shutdown")
            results = await asyncio.gather(*tasks, return_exceptions=True)
            for result in results:
                if isinstance(result, Exception):
                    logger.error(f"Parser failed during shutdown: {result}")

        self._contexts.clear()
        self._workspaces.clear()
        self._workspaces_initialized = False
        logger.info("Parser registry shut down")

    def _new_context(
        self,
        key: Path,
        is_workspace: bool = False,
        settings: Optional[CompilerSettings] = None
    ) -> ParserContext:
        return ParserContext(
            key,
            is_workspace,
            settings=settings or self.settings,
            oracle=self.oracle,
            on_workspace_parsed=self.garbage_collect
        )

    def _settings_for_workspace(self, workspace_path: Path) -> CompilerSettings:
        if self.config_loader is None:
            return self.settings
        return self.config_loader.load_workspace_settings(workspace_path, base=self.settings)

    def _create_workspace_context(self, workspace: WorkspaceFolder) -> ParserContext:
        key = workspace.path
        settings = self._settings_for_workspace(key)
        context = self._new_context(key, is_workspace=True, settings=settings)

        self._contexts[key] = context
        self._workspaces[key] = workspace
        logger.info(f"Created workspace parser for {key}")

        # Starts the first invocation when a main file is found
        context.set_main_file(self.get_workspace_default_main_file(key, settings))
        return context

    def create_workspace_contexts(self, workspaces: Iterable[WorkspaceFolder]) -> None:
        """
        Create a workspace context for every workspace folder.

        Workspaces with a main file start compiling right away, so this
        must be called from a running event loop.

        Raises:
            RuntimeError: If no event loop is running. No context is
                created in that case.
        """
        asyncio.get_running_loop()
        for workspace in workspaces:
            self._create_workspace_context(workspace)

        self._workspaces_initialized = True

    def update_workspaces(
        self,
        removed: Iterable[WorkspaceFolder],
        added: Iterable[WorkspaceFolder]
    ) -> None:
        """Apply a workspace folder change event, from a running event loop"""
        asyncio.get_running_loop()

        for workspace in removed:
            key = workspace.path
            self._contexts.pop(key, None)
            if self._workspaces.pop(key, None) is not None:
                logger.info(f"Removed workspace parser for {key}")

        for workspace in added:
            self._create_workspace_context(workspace)

    def get_workspace_default_main_file(
        self,
        workspace_path: Path,
        settings: Optional[CompilerSettings] = None
    ) -> str:
        """
        Pick the main file of a workspace.

        A configured main file wins when it exists. Otherwise the workspace
        directory name and then the known names are tried, each against the
        known extensions in order; the first existing file wins.

        Returns:
            Main file relative to the workspace, or "" if none was found
        """
        preferred = (settings or self.settings).main_file
        if preferred and (workspace_path / preferred).is_file():
            return preferred

        for name in [workspace_path.name] + MAIN_FILE_CANDIDATE_NAMES:
            for extension in MAIN_FILE_EXTENSIONS:
                candidate = name + extension
                if (workspace_path / candidate).is_file():
                    return candidate

        return ""

    async def resolve(self, path: Union[str, Path]) -> Path:
        """
        Find the key of the context that owns a file.

        Returns:
            A workspace root when the file is that workspace, its main file,
            or one of its included files; the path itself otherwise
        """
        path = Path(path)

        if not self.capabilities.workspace_folders:
            return path

        # Workspace root or workspace main file, no waiting needed
        for key in list(self._workspaces):
            context = self._contexts.get(key)
            if context is None:
                continue

            if path == key or (path.parent == key and path.name == context.get_main_file()):
                return key

        # Files included by a workspace; known once its compilation finished
        for key in list(self._workspaces):
            if not _is_within(path, key):
                continue

            context = self._contexts.get(key)
            if context is None:
                continue

            await context.wait_for_result()

            # Workspace may have been removed while waiting
            if key not in self._workspaces:
                continue

            if context.symbols.includes_file(path):
                return key

        return path

    async def get_or_create_context(
        self,
        path: Union[str, Path],
        auto_create: bool = True
    ) -> Optional[ParserContext]:
        """
        Get the context owning a file.

        Creates a standalone context when none exists and ``auto_create`` is
        set. New contexts are not started; callers call ``run()``.
        """
        key = await self.resolve(path)
        context = self._contexts.get(key)

        if context is None and auto_create:
            context = self._new_context(key)
            self._contexts[key] = context
            logger.debug(f"Created standalone parser for {key}")

        return context

    async def ensure_parsed(self, path: Union[str, Path]) -> ParserContext:
        """Get or create the owning context and wait until it has a result"""
        context = await self.get_or_create_context(path)

        if context.runs_completed == 0 and not context.is_in_progress():
            context.run()

        await context.wait_for_result()
        return context

    async def remove_context(self, path: Union[str, Path]) -> bool:
        """
        Remove the context owning a file.

        Removing a workspace context drops its workspace descriptor too.

        Returns:
            True if a context was removed
        """
        key = await self.resolve(path)
        context = self._contexts.pop(key, None)

        if context is None:
            return False

        if context.is_workspace_scoped():
            self._workspaces.pop(key, None)

        logger.info(f"Removed parser for {key}")
        return True

    async def garbage_collect(self, workspace_context: Optional[ParserContext] = None) -> int:
        """
        Remove standalone contexts now owned by a workspace context.

        Returns:
            Number of contexts removed
        """
        if not self.capabilities.workspace_folders or not self._workspaces_initialized:
            return 0

        removed = 0
        for key, context in list(self._contexts.items()):
            if context.is_workspace_scoped():
                continue

            owner_key = await self.resolve(key)
            if owner_key == key:
                continue

            owner = self._contexts.get(owner_key)
            if owner is None or not owner.is_workspace_scoped():
                continue

            # Still the same entry after the awaits above
            if self._contexts.get(key) is context:
                del self._contexts[key]
                removed += 1
                logger.info(f"Garbage collected parser for {key}, now owned by {owner_key}")

        if workspace_context is not None and removed:
            logger.debug(f"Garbage collection after {workspace_context.root_path} removed {removed} parsers")

        return removed

    def apply_settings(self, settings: CompilerSettings) -> List[asyncio.Task]:
        """Switch to new settings and recompile every context"""
        self.settings = settings
        if isinstance(self.oracle, CompilerOracle):
            self.oracle.settings = settings
        if self.config_loader is not None:
            self.config_loader.invalidate()

        tasks = []
        for key, context in list(self._contexts.items()):
            if context.is_workspace_scoped():
                context.settings = self._settings_for_workspace(key)
            else:
                context.settings = settings

            task = context.run()
            if task is not None:
                tasks.append(task)

        logger.info(f"Applied new compiler settings, {len(tasks)} parsers restarted")
        return tasks

    def contexts(self) -> Iterator[ParserContext]:
        """Iterate over all registered contexts"""
        return iter(list(self._contexts.values()))

    def workspace_keys(self) -> List[Path]:
        return list(self._workspaces)

    def get_workspace(self, key: Union[str, Path]) -> Optional[WorkspaceFolder]:
        return self._workspaces.get(Path(key))

    def is_workspace_initialized(self) -> bool:
        return self._workspaces_initialized

    def __contains__(self, key: Union[str, Path]) -> bool:
        return Path(key) in self._contexts

    def __len__(self) -> int:
        return len(self._contexts)

    def get_registry_stats(self) -> Dict[str, Any]:
        """Get registry statistics"""
        return {
            "total_contexts": len(self._contexts),
            "workspace_contexts": len(self._workspaces),
            "standalone_contexts": len(self._contexts) - len(self._workspaces),
            "in_progress": sum(1 for c in self._contexts.values() if c.is_in_progress()),
            "workspaces_initialized": self._workspaces_initialized,
            "workspaces": [str(key) for key in self._workspaces]
        }
