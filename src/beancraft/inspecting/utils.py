"""
Inspecting utilities.
"""


def safe_issubclass(cls: type, class_or_tuple: type | tuple[type, ...], /) -> bool:
    """
    `issubclass()` can raise `TypeError` in some cases, even when the arguments are
    types; handle it and gracefully return `False`.
    """
    if not isinstance(cls, type):
        return False

    try:
        is_subclass = issubclass(cls, class_or_tuple)
    except TypeError:
        return False

    return is_subclass
