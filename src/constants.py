"""Project-wide constants."""

# Cheap, large-context model used for novelty judgment and selection.
DEFAULT_MODEL = "gpt-4.1-nano"

JOURNAL_ENCODING = "utf-8"
