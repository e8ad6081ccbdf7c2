"""
Classification of version strings.
"""


def is_tag(version_or_tag: str) -> bool:
    """
    Determines whether a string is a tag (in the npm sense) or a version.

    In ``foo@1.2.3`` the string ``1.2.3`` is a version; in ``foo@latest`` the
    string ``latest`` is a tag. Anything that does not begin with a decimal
    digit is a tag, so ``v1.0.0`` is treated as a tag.
    """
    first = version_or_tag[:1]
    return not (first and first in "0123456789")
