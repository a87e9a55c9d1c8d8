from collab.common.exceptions import InternalException


class IdentityException(InternalException):
    pass


class IdentityTokenInvalid(IdentityException):
    pass


class IdentityTokenExpired(IdentityException):
    pass


class IdentityProviderUnavailable(IdentityException):
    """
    The provider could not be reached or answered with something unexpected
    """

    pass
