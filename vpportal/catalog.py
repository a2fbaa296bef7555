"""
Fixed picture catalogs a student chooses from at login.

Ordering is part of the contract: the login screen renders entries in the
order listed here, so never sort or shuffle them.
"""

from enum import Enum
from typing import Dict, NamedTuple, Tuple


class VisualPasswordType(str, Enum):
    ANIMAL = "animal"
    OBJECT = "object"
    COLOR_SHAPE = "color_shape"

    @classmethod
    def parse(cls, value) -> "VisualPasswordType":
        """Return the enum member for ``value``; raise ValueError if unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unknown visual password type: {value!r}") from None


class OptionCatalogEntry(NamedTuple):
    id: str
    label: str
    glyph: str

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "label": self.label, "glyph": self.glyph}


ANIMALS: Tuple[OptionCatalogEntry, ...] = (
    OptionCatalogEntry("cat", "Cat", "\U0001F431"),
    OptionCatalogEntry("dog", "Dog", "\U0001F436"),
    OptionCatalogEntry("rabbit", "Rabbit", "\U0001F430"),
    OptionCatalogEntry("bear", "Bear", "\U0001F43B"),
    OptionCatalogEntry("lion", "Lion", "\U0001F981"),
    OptionCatalogEntry("tiger", "Tiger", "\U0001F42F"),
    OptionCatalogEntry("fox", "Fox", "\U0001F98A"),
    OptionCatalogEntry("panda", "Panda", "\U0001F43C"),
    OptionCatalogEntry("koala", "Koala", "\U0001F428"),
    OptionCatalogEntry("monkey", "Monkey", "\U0001F435"),
    OptionCatalogEntry("elephant", "Elephant", "\U0001F418"),
    OptionCatalogEntry("pig", "Pig", "\U0001F437"),
)

OBJECTS: Tuple[OptionCatalogEntry, ...] = (
    OptionCatalogEntry("apple", "Apple", "\U0001F34E"),
    OptionCatalogEntry("banana", "Banana", "\U0001F34C"),
    OptionCatalogEntry("car", "Car", "\U0001F697"),
    OptionCatalogEntry("house", "House", "\U0001F3E0"),
    OptionCatalogEntry("tree", "Tree", "\U0001F333"),
    OptionCatalogEntry("flower", "Flower", "\U0001F338"),
    OptionCatalogEntry("star", "Star", "⭐"),
    OptionCatalogEntry("heart", "Heart", "❤️"),
    OptionCatalogEntry("sun", "Sun", "☀️"),
    OptionCatalogEntry("moon", "Moon", "\U0001F319"),
    OptionCatalogEntry("book", "Book", "\U0001F4DA"),
    OptionCatalogEntry("ball", "Ball", "⚽"),
)

COLORS: Tuple[OptionCatalogEntry, ...] = (
    OptionCatalogEntry("red", "Red", "\U0001F534"),
    OptionCatalogEntry("blue", "Blue", "\U0001F535"),
    OptionCatalogEntry("green", "Green", "\U0001F7E2"),
    OptionCatalogEntry("yellow", "Yellow", "\U0001F7E1"),
    OptionCatalogEntry("purple", "Purple", "\U0001F7E3"),
    OptionCatalogEntry("orange", "Orange", "\U0001F7E0"),
    OptionCatalogEntry("pink", "Pink", "\U0001FA77"),
    OptionCatalogEntry("brown", "Brown", "\U0001F7E4"),
)

SHAPES: Tuple[OptionCatalogEntry, ...] = (
    OptionCatalogEntry("circle", "Circle", "●"),
    OptionCatalogEntry("square", "Square", "■"),
    OptionCatalogEntry("triangle", "Triangle", "▲"),
    OptionCatalogEntry("star", "Star", "★"),
    OptionCatalogEntry("heart", "Heart", "♥"),
    OptionCatalogEntry("diamond", "Diamond", "♦"),
)

# Profile pictures shown on the class roster (not part of any password)
AVATARS: Tuple[OptionCatalogEntry, ...] = (
    OptionCatalogEntry("girl_blonde", "Girl (Blonde)", "\U0001F467\U0001F3FC"),
    OptionCatalogEntry("boy_blonde", "Boy (Blonde)", "\U0001F466\U0001F3FC"),
    OptionCatalogEntry("girl_brown", "Girl (Brown Hair)", "\U0001F467\U0001F3FD"),
    OptionCatalogEntry("boy_brown", "Boy (Brown Hair)", "\U0001F466\U0001F3FD"),
    OptionCatalogEntry("girl_dark", "Girl (Dark Hair)", "\U0001F467\U0001F3FF"),
    OptionCatalogEntry("boy_dark", "Boy (Dark Hair)", "\U0001F466\U0001F3FF"),
    OptionCatalogEntry("student_yellow", "Student", "\U0001F9D2"),
    OptionCatalogEntry("student_light", "Student (Light Skin)", "\U0001F9D2\U0001F3FB"),
    OptionCatalogEntry("student_medium", "Student (Medium Skin)", "\U0001F9D2\U0001F3FD"),
    OptionCatalogEntry("student_dark", "Student (Dark Skin)", "\U0001F9D2\U0001F3FF"),
    OptionCatalogEntry("cat", "Friendly Cat", "\U0001F431"),
    OptionCatalogEntry("dog", "Happy Dog", "\U0001F436"),
    OptionCatalogEntry("panda", "Playful Panda", "\U0001F43C"),
    OptionCatalogEntry("dino", "Cute Dinosaur", "\U0001F995"),
    OptionCatalogEntry("rocket", "Rocket Pilot", "\U0001F680"),
    OptionCatalogEntry("star", "Shining Star", "⭐"),
)

_SINGLE_CHOICE = {
    VisualPasswordType.ANIMAL: ANIMALS,
    VisualPasswordType.OBJECT: OBJECTS,
}


def list_options(password_type) -> Dict[str, Tuple[OptionCatalogEntry, ...]]:
    """
    Every selector the login screen must show for ``password_type``, by name.

    animal and object have one selector (``options``); color_shape has two
    (``colors`` and ``shapes``) and a guess must pick from both.
    """
    ptype = VisualPasswordType.parse(password_type)
    if ptype is VisualPasswordType.COLOR_SHAPE:
        return {"colors": COLORS, "shapes": SHAPES}
    return {"options": _SINGLE_CHOICE[ptype]}


def list_avatars() -> Tuple[OptionCatalogEntry, ...]:
    return AVATARS


def is_catalog_key(catalog, key: str) -> bool:
    return any(entry.id == key for entry in catalog)
