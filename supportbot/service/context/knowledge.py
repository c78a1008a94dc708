import logging
from pathlib import Path

import supportbot.config.config as configs

logger = logging.getLogger(__name__)

PLACEHOLDER = "Context data will be loaded here. Please add your Stack Creamery information to this file."
UNAVAILABLE = "I apologize, but I'm having trouble accessing my knowledge base right now."

_context = ""
_last_modified = None


def load_context(path=None) -> str:
    """Re-read the knowledge file only when its mtime moved forward."""
    global _context, _last_modified
    context_path = Path(path or configs.CONTEXT_PATH)
    try:
        if not context_path.exists():
            logger.info("Creating placeholder %s", context_path)
            context_path.parent.mkdir(parents=True, exist_ok=True)
            context_path.write_text(PLACEHOLDER, encoding="utf-8")

        mtime = context_path.stat().st_mtime
        if _last_modified is None or mtime > _last_modified:
            _context = context_path.read_text(encoding="utf-8")
            _last_modified = mtime
            logger.info("Context data loaded from %s", context_path)
        return _context
    except OSError:
        logger.exception("Error loading context")
        return UNAVAILABLE


def reset_context() -> None:
    global _context, _last_modified
    _context = ""
    _last_modified = None
