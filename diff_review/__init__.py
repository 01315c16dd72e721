"""
diff_review — review AI rewrites of a document hunk by hunk.

Public API for library usage::

    from diff_review import Document, DiffSessionManager

    doc = Document("notes.md", original_text)
    manager = DiffSessionManager(doc)
    manager.start_session(rewritten_text, summary="Tightened wording")
    manager.accept_all()
    manager.finalize()      # doc.content is now the rewrite; doc.undo() reverts it
"""

from .config import Config
from .editing import Document, DiffSessionManager, OperationResult

__all__ = ["Config", "Document", "DiffSessionManager", "OperationResult"]
