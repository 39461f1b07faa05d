from __future__ import annotations

import random
from dataclasses import dataclass

from dialogue_coach.config import MAX_TILES
from dialogue_coach.exercises.randomness import shuffled


@dataclass
class Tile:
    id: str
    text: str
    is_placed: bool = False

    def to_dict(self) -> dict:
        return {"id": self.id, "text": self.text, "is_placed": self.is_placed}


def chunk_sentence(sentence: str, max_tiles: int = MAX_TILES) -> list[str]:
    """Split a sentence into at most ``max_tiles`` ordered word/phrase chunks.

    Sentences that fit keep one tile per word. Longer ones merge neighbours
    with a wrapping left-to-right cursor so merged chunks stay 2-3 words long
    instead of piling onto the first tile.
    """
    limit = max(1, int(max_tiles))
    words = [word for word in str(sentence or "").split() if word]
    if len(words) <= limit:
        return words

    tiles = list(words)
    cursor = 0
    while len(tiles) > limit:
        if cursor >= len(tiles) - 1:
            cursor = 0
        tiles[cursor] = f"{tiles[cursor]} {tiles[cursor + 1]}"
        del tiles[cursor + 1]
        cursor += 1
    return tiles


def build_tiles(sentence: str, *, max_tiles: int = MAX_TILES, rng: random.Random | None = None) -> list[Tile]:
    tiles = [Tile(id=f"{idx}-{chunk}", text=chunk) for idx, chunk in enumerate(chunk_sentence(sentence, max_tiles))]
    return shuffled(tiles, rng)
