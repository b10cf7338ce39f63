"""Text rewrite rules applied to taxonomy text before parsing."""

import logging
import re

from pydantic import BaseModel, model_validator

logger = logging.getLogger(__name__)


class TextFixup(BaseModel):
    """
    One documented rewrite of the raw taxonomy text.

    Literal rules replace every occurrence of `pattern`. Regex rules are compiled
    with re.MULTILINE, so `^` anchors at the start of each line.
    """

    pattern: str
    replacement: str = ""
    regex: bool = False
    description: str = ""

    @model_validator(mode="after")
    def _validate_pattern(self) -> "TextFixup":
        if not self.pattern:
            raise ValueError("fixup pattern must not be empty")
        if self.regex:
            try:
                re.compile(self.pattern, re.MULTILINE)
            except re.error as e:
                raise ValueError(f"Invalid fixup regex {self.pattern!r}: {e}") from e
        return self

    def apply(self, text: str) -> tuple[str, int]:
        """Return the rewritten text and the number of replacements made."""
        if self.regex:
            return re.subn(self.pattern, self.replacement, text, flags=re.MULTILINE)
        count = text.count(self.pattern)
        return text.replace(self.pattern, self.replacement), count


def apply_fixups(text: str, fixups: list[TextFixup]) -> str:
    """
    Apply fixups in list order. Later rules see the output of earlier ones.

    A rule that matches nothing is logged at DEBUG level only.
    """
    for fixup in fixups:
        text, count = fixup.apply(text)
        label = fixup.description or fixup.pattern
        if count:
            logger.info("Taxonomy fixup applied %d time(s): %s", count, label)
        else:
            logger.debug("Taxonomy fixup matched nothing: %s", label)
    return text
