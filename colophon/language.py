from __future__ import annotations

import logging
from typing import Optional

import langcodes

logger = logging.getLogger("colophon.language")


def parse_language(raw: Optional[str]) -> Optional[langcodes.Language]:
    """Parse a ``dc:language`` value such as ``en-US``; ``None`` if it is not a language tag."""
    if not raw or not raw.strip():
        return None
    try:
        return langcodes.Language.get(raw.strip())
    except ValueError:
        logger.debug("unparseable language tag %r", raw)
        return None
