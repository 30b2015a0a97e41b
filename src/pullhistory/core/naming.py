"""File naming for entity series and charts."""

# Characters that would split an entity name into path components
_PATH_SEPARATORS = ("/", "\\")


def safe_name(name: str) -> str:
    """Return a file-system safe base name for an entity.

    Path separators are replaced by underscores, so "falcosecurity/falco"
    becomes "falcosecurity_falco" and "SUM/falco" becomes "SUM_falco".
    """
    for sep in _PATH_SEPARATORS:
        name = name.replace(sep, "_")
    return name
