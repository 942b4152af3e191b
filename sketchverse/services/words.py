# sketchverse/services/words.py
import random

WORD_LIST = [
    "Star", "Mountain", "House", "Tree", "Car", "Sun", "Moon", "Cloud", "Flower", "Boat",
    "Bridge", "Key", "Book", "Clock", "Fish", "Bird", "Cat", "Dog", "Chair", "Table",
]


def pick_word(words: list[str] | None = None) -> str:
    """Uniform draw with replacement; a word may come up again in the same game."""
    return random.choice(words or WORD_LIST)


def mask_word(word: str | None) -> str | None:
    """Underscore mask shown to players who have not solved the word yet."""
    if not word:
        return None
    return "_" * len(word)
