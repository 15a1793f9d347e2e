class TypeSprintError(Exception):
    """Base class for errors raised at the edges of the app."""


class DatabaseError(TypeSprintError):
    pass


class ContentError(TypeSprintError):
    pass


class InvalidTargetError(TypeSprintError):
    pass
