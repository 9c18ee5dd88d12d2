from rest_framework import status


class SocialGraphError(Exception):
    """Base class for errors raised by the follow graph and profile services."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Something went wrong."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(SocialGraphError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "User not found"


class Unauthorized(SocialGraphError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You are not allowed to do that"


class SelfFollowError(SocialGraphError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "You cannot follow yourself"


class StoreUnavailable(SocialGraphError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Storage is temporarily unavailable"
