class ServiceError(Exception):
    """Base exception for shop/user service failures."""

    pass


class NotFoundError(ServiceError):
    """The requested shop or user does not exist."""

    pass


class ConflictError(ServiceError):
    """A unique field (username, email) is already taken."""

    pass


class RepositoryError(ServiceError):
    """The storage backend cannot perform the operation."""

    pass


class ReadOnlyRepositoryError(RepositoryError):
    """The data source does not support writes."""

    pass
