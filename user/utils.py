from django.conf import settings

ACCESS_MAX_AGE = 30 * 60
REFRESH_MAX_AGE = 7 * 24 * 60 * 60


def set_auth_cookies(response, access_token, refresh_token):
    """Attach both JWTs as HttpOnly cookies; Secure outside DEBUG."""
    for key, value, max_age in (
        ("access", access_token, ACCESS_MAX_AGE),
        ("refresh", refresh_token, REFRESH_MAX_AGE),
    ):
        response.set_cookie(
            key=key,
            value=str(value),
            httponly=True,
            secure=settings.COOKIE_SECURE,
            samesite="None" if settings.COOKIE_SECURE else "Lax",
            max_age=max_age,
        )
    return response


def clear_auth_cookies(response):
    response.delete_cookie('access')
    response.delete_cookie('refresh')
    return response
