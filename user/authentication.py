from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework.exceptions import AuthenticationFailed


class CookieJWTAuthentication(JWTAuthentication):
    """
    Reads the access token from the HttpOnly "access" cookie set at login, and
    falls back to the standard "Authorization: Bearer" header for API clients.
    """

    cookie_name = 'access'

    def authenticate(self, request):
        raw_token = request.COOKIES.get(self.cookie_name)
        if raw_token is None:
            return super().authenticate(request)

        try:
            validated_token = self.get_validated_token(raw_token)
        except Exception as exc:
            # Keep message concise to avoid leaking internals
            raise AuthenticationFailed('Token Validation Error: {}'.format(exc))

        try:
            user = self.get_user(validated_token)
        except Exception as exc:
            raise AuthenticationFailed('User Retrieval Error: {}'.format(exc))

        return (user, validated_token)
