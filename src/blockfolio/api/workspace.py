"""
Process-wide document workspace for the HTTP API.

Bundles the pieces one served document needs:

- **Editor**: the live :class:`~blockfolio.editor.surface.BlockEditor`,
  seeded from the store at startup (default document when nothing usable is
  stored).
- **Persistence**: a :class:`~blockfolio.core.storage.store.DocumentStore`
  plus a :class:`~blockfolio.core.storage.debounce.DebouncedSaver` wired to
  the editor's change notifications.
- **Export**: a single-flight :class:`~blockfolio.pipelines.export_flow.Exporter`.

The storage key comes from settings (or the constructor), never from a module
constant, so tests can run several independent workspaces side by side.
"""

from __future__ import annotations

from typing import Any, ClassVar

from blockfolio.core.result import Result
from blockfolio.core.settings import Settings, get_logger, load_settings
from blockfolio.core.storage.debounce import DebouncedSaver
from blockfolio.core.storage.disk import FileStore
from blockfolio.core.storage.store import DocumentStore
from blockfolio.editor.surface import BlockEditor, attach_autosave
from blockfolio.layout.reportlab_renderer import ReportLabRenderer
from blockfolio.pipelines.export_flow import (
    ExportArtifact,
    ExportError,
    Exporter,
    PageLayoutRenderer,
)

logger = get_logger(__name__)


class Workspace:
    """One live document with its store and exporter."""

    # Singleton instance placeholder (initialized in app startup)
    _instance: ClassVar[Workspace | None] = None

    def __init__(
        self,
        store: DocumentStore | None = None,
        *,
        key: str | None = None,
        renderer: PageLayoutRenderer | None = None,
        config: Settings | None = None,
    ) -> None:
        cfg = config or load_settings()
        self.key = key or cfg.storage_key
        self.store = store if store is not None else FileStore(cfg.storage_dir)
        self.editor = BlockEditor(self.store.load(self.key))
        self.saver = DebouncedSaver(self.store, self.key, delay=cfg.autosave_delay)
        self._detach = attach_autosave(self.editor, self.saver)
        self.exporter = Exporter(
            renderer or ReportLabRenderer(),
            basename=cfg.export_basename,
            info=cfg.document_info(),
        )

    @classmethod
    def get_instance(cls) -> Workspace:
        """Accessor for the global singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def set_instance(cls, workspace: Workspace | None) -> None:
        """Install (or drop, with ``None``) the global instance."""
        cls._instance = workspace

    def replace_document(self, content: Any) -> bool:
        """Replace the live document and persist it right away."""
        self.editor.replace_document(content)
        return self.saver.flush()

    def clear(self) -> bool:
        """Forget the stored document and reset the editor to the default."""
        self.editor.replace_document(None)
        self.saver.cancel()
        return self.store.clear(self.key)

    async def export(self, title: str | None = None) -> Result[ExportArtifact, ExportError]:
        return await self.exporter.export(self.editor.document, title)

    def shutdown(self) -> None:
        """Write any pending autosave and detach from the editor."""
        self.saver.flush()
        self._detach()


# Global accessor for convenience
def get_workspace() -> Workspace:
    return Workspace.get_instance()


__all__ = ["Workspace", "get_workspace"]
