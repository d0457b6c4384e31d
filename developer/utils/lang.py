"""Language identifiers for fenced code output."""

from pathlib import Path

from developer.constants import FILENAME_LANGUAGE_MAP, LANGUAGE_MAP


def get_language_identifier(path: Path) -> str:
    """Infer a syntax highlighting identifier from a file name.

    Args:
        path: File path

    Returns:
        Language identifier, or an empty string when unknown
    """
    path = Path(path)
    if path.name in FILENAME_LANGUAGE_MAP:
        return FILENAME_LANGUAGE_MAP[path.name]
    return LANGUAGE_MAP.get(path.suffix.lower(), "")
