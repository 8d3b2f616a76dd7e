"""Deck sizes, draw defaults, and display precision for probability questions."""

COMMANDER_DECK_SIZE = 100
CONSTRUCTED_DECK_SIZE = 60
LIMITED_DECK_SIZE = 40

OPENING_HAND_SIZE = 7

# Combo groups ask for at least one copy unless told otherwise
DEFAULT_GROUP_MIN = 1

PERCENT_DECIMALS = 2
ODDS_DECIMALS = 2

PROBABILITY_TOLERANCE = 1e-9
