import re
import unicodedata
from typing import List


class ResponseFormatter:
    """
    Cleans generated answers and reads back which sources they cite.
    """

    def __init__(self):
        # Introductory fluff: "Sure!", "Here's the answer:", "Based on the sources," ...
        self.chatter_pattern = re.compile(
            r"^(?:(?:certainly|sure|yes|absolutely)[.,!]*\s*)?"
            r"(?:here(?: is|'s)? (?:the|your) (?:answer|response|information|explanation)|"
            r"based on (?:the )?(?:provided )?(?:context|sources?)|"
            r"according to (?:the )?(?:provided )?(?:context|sources?|text|documents?)|"
            r"to answer (?:the|your) question).*?[:,-]?\s*\n*",
            re.IGNORECASE
        )

        # Bracketed citation groups: [1], [2, 3], [1][4]
        self.citation_pattern = re.compile(r"\[(\d+(?:\s*,\s*\d+)*)\]")

        self.spacing_pattern = re.compile(r"\n{3,}")
        self.trailing_ws_pattern = re.compile(r"[ \t]+$", re.MULTILINE)

    # ============================================================
    # PUBLIC FORMAT METHOD
    # ============================================================

    def format(self, text: str) -> str:
        if not text or not isinstance(text, str):
            return ""

        text = text.strip()
        text = self._remove_prefixes(text)
        text = self._normalize_unicode(text)
        text = self._clean_spacing(text)

        return text.strip()

    def cited_indices(self, text: str, n_sources: int) -> List[int]:
        """Distinct source indices in 1..n_sources cited by the answer, sorted."""

        if not text:
            return []

        cited = set()
        for group in self.citation_pattern.findall(text):
            for part in group.split(","):
                index = int(part.strip())
                if 1 <= index <= n_sources:
                    cited.add(index)

        return sorted(cited)

    # ============================================================
    # PIPELINE METHODS
    # ============================================================

    def _remove_prefixes(self, text: str) -> str:
        match = self.chatter_pattern.match(text)
        if not match:
            return text

        stripped = text[match.end():].strip()

        # Keep the text when nothing is left, or when the prefix carries a citation
        if not stripped or stripped.startswith("["):
            return text
        return stripped

    def _normalize_unicode(self, text: str) -> str:
        text = unicodedata.normalize("NFKC", text)

        replacements = {
            "“": '"', "”": '"',
            "‘": "'", "’": "'",
            "–": "-", "—": "-"
        }
        for old, new in replacements.items():
            text = text.replace(old, new)

        # Drop control characters that break JSON (keep \r \n \t)
        return "".join(
            ch for ch in text
            if unicodedata.category(ch)[0] != "C" or ch in "\r\n\t"
        )

    def _clean_spacing(self, text: str) -> str:
        text = self.spacing_pattern.sub("\n\n", text)
        return self.trailing_ws_pattern.sub("", text)
