from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List

CHAPTER_LIST_ANCHOR = "1."


@dataclass
class ChapterRecord:
    id: int
    name: str
    topics: List[str] = field(default_factory=list)
    done: bool = False

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def parse_chapter_list(raw: str) -> List[ChapterRecord]:
    """
    Turn the assistant's numbered-list reply into chapter records.

    Everything before the first "1." is dropped. Each remaining non-empty
    line becomes one chapter, numbered from 1, with the line kept verbatim
    (its "N." prefix included). Only exactly-empty lines are skipped; a
    line of spaces is still a chapter. Line shape is not checked.
    """
    start = raw.find(CHAPTER_LIST_ANCHOR)
    if start == -1:
        return []

    lines = [line for line in raw[start:].split("\n") if line != ""]
    return [ChapterRecord(id=index, name=line) for index, line in enumerate(lines, start=1)]
