"""Errors raised by the backend store client."""


class BackendError(Exception):
    """The store rejected an operation or failed while running it."""


class BackendUnavailableError(BackendError):
    """The store could not be reached."""


class BackendAuthorizationError(BackendError):
    """A privileged operation was attempted with an unprivileged client."""


__all__ = ["BackendAuthorizationError", "BackendError", "BackendUnavailableError"]
