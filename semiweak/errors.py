"""Error kinds raised at the semi-weak reference call boundary."""


class InvalidArgument(ValueError):
    """Target identity is absent, destroyed or cannot be weakly referenced."""


class ParentLocked(InvalidArgument):
    """Parent of a destroyed instance cannot change."""
