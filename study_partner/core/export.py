"""Flashcard export in the two-column CSV format Anki imports."""

import csv
import io
from pathlib import Path
from typing import Iterable

from study_partner.ai.schema import Card


def cards_to_csv(cards: Iterable[Card]) -> str:
    """One "front","back" row per card; embedded quotes are doubled. Rows are joined by newlines."""
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for card in cards:
        writer.writerow([card.front, card.back])
    return buf.getvalue().rstrip("\n")


def write_cards_csv(cards: Iterable[Card], path: str | Path) -> Path:
    """Write cards_to_csv output to path as UTF-8 and return the path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(cards_to_csv(cards), encoding="utf-8")
    return path
