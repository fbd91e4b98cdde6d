"""Filename heuristics for mod release artifacts."""

RELEASE_EXTENSION = ".jar"
DISABLED_SUFFIX = ".disabled"
LOADER_SUFFIXES = ("-forge", "_forge", "-fabric", "_fabric", "-mc", "_mc")
SEPARATORS = "-_"


def _strip_extension(filename: str) -> str:
    if filename.endswith(RELEASE_EXTENSION):
        return filename[: -len(RELEASE_EXTENSION)]
    return filename


def is_release_artifact(filename: str) -> bool:
    """Check if a filename looks like a release artifact (``.jar``)."""
    return filename.endswith(RELEASE_EXTENSION)


def is_disabled(filename: str) -> bool:
    return filename.endswith(DISABLED_SUFFIX)


def extract_name(filename: str) -> str | None:
    """
    Extract the logical mod name from a release filename.

    The name is everything before the first dotted numeric token, e.g.
    ``jei-1.20.1-forge-15.2.0.jar`` -> ``jei``. Trailing separators are
    trimmed and one loader suffix (``-forge``, ``_fabric``, ``-mc``...)
    is removed.

    Returns None when no version token starts in the filename or the
    name before it is empty.
    """
    stem = _strip_extension(filename)

    for i, char in enumerate(stem):
        if char.isdigit() and "." in stem[i + 1 :]:
            break
    else:
        return None

    name = stem[:i].rstrip(SEPARATORS)
    for suffix in LOADER_SUFFIXES:
        if name.endswith(suffix):
            name = name[: -len(suffix)]
            break

    return name or None


def extract_version(filename: str) -> str | None:
    """
    Extract the trailing version token from a release filename.

    ``jei-1.20.1-forge-15.2.0.jar`` -> ``15.2.0``. Characters after the
    last digit are ignored.
    """
    stem = _strip_extension(filename)

    end = None
    for i in range(len(stem) - 1, -1, -1):
        if stem[i].isdigit():
            end = i
            break
    if end is None:
        return None

    start = end
    while start > 0 and stem[start - 1] not in SEPARATORS:
        start -= 1

    return stem[start : end + 1]
