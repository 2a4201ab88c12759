"""reprise: spaced-repetition scheduling and card selection."""

from reprise.consts import VERSION

__version__ = VERSION
