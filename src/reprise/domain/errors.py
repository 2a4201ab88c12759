"""Exceptions raised by reprise.

Dangling review references and empty pools are not errors: they are
recovered locally (silent omission, empty result).
"""


class RepriseError(Exception):
    """Base class for every reprise error."""


class ConfigOutOfRange(RepriseError, ValueError):
    """A scheduling parameter fell outside its declared bounds under strict validation."""

    def __init__(self, field_name: str, value: float, bounds: tuple[float, float]):
        self.field_name = field_name
        self.value = value
        self.bounds = bounds
        super().__init__(
            f"{field_name}={value} is outside the allowed range [{bounds[0]}, {bounds[1]}]"
        )


class UnknownModeError(RepriseError, LookupError):
    """No selection strategy is registered for the requested mode."""

    def __init__(self, mode: object):
        self.mode = mode
        super().__init__(f"No selection strategy registered for practice mode {mode!r}")


class ItemNotFoundError(RepriseError, LookupError):
    """An operation required an item that the item repository does not know."""

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Item {item_id!r} not found")


class DeckFormatError(RepriseError, ValueError):
    """A deck file could not be read as a list of cards."""

    def __init__(self, path: object, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")
