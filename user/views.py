import logging
from django.contrib.auth import authenticate
from django.contrib.auth.models import User
from django.utils.decorators import method_decorator
from django.views.decorators.cache import never_cache
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from .authentication import CookieJWTAuthentication
from .serializers import LoginSerializer, MeSerializer, RegisterSerializer
from .utils import clear_auth_cookies, set_auth_cookies

logger = logging.getLogger(__name__)


@method_decorator(never_cache, name="dispatch")
class RegisterView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        """Create an account (and its profile) and log the new user in."""
        serializer = RegisterSerializer(data=request.data)
        if not serializer.is_valid():
            logger.warning(f"Registration rejected: {serializer.errors}")
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            user = serializer.save()
        except Exception as e:
            logger.exception(f"Unexpected error during registration: {e}")
            return Response({"error": "Something went wrong. Please try again."}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        refresh = RefreshToken.for_user(user)
        logger.info(f"User '{user.username}' registered successfully")
        response = Response(serializer.data, status=status.HTTP_201_CREATED)
        return set_auth_cookies(response, refresh.access_token, refresh)


@method_decorator(never_cache, name="dispatch")
class LoginView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        username = serializer.validated_data['username']
        if not User.objects.filter(username=username).only('id').exists():
            return Response({"error": "User does not exist. Please sign up first."}, status=status.HTTP_404_NOT_FOUND)

        user = authenticate(request, username=username, password=serializer.validated_data['password'])
        if not user:
            logger.warning(f"Failed login for {username}")
            return Response({"error": "Incorrect password. Please try again."}, status=status.HTTP_401_UNAUTHORIZED)

        refresh = RefreshToken.for_user(user)
        logger.info(f"User {username} logged in")
        response = Response({"message": "Login successful!", "user_id": user.pk}, status=status.HTTP_200_OK)
        return set_auth_cookies(response, refresh.access_token, refresh)


@method_decorator(never_cache, name="dispatch")
class LogoutView(APIView):
    authentication_classes = [CookieJWTAuthentication]
    permission_classes = [IsAuthenticated]

    def post(self, request):
        refresh_token = request.COOKIES.get('refresh')
        if not refresh_token:
            return Response({"error": "Refresh token missing"}, status=status.HTTP_401_UNAUTHORIZED)

        try:
            RefreshToken(refresh_token).blacklist()
        except TokenError as e:
            logger.warning(f"Invalid refresh token during logout: {e}")
            return Response({"error": "Invalid refresh token"}, status=status.HTTP_400_BAD_REQUEST)

        response = Response({"message": "Logged out successfully."}, status=status.HTTP_200_OK)
        return clear_auth_cookies(response)


@method_decorator(never_cache, name="dispatch")
class CookieTokenRefreshView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        raw_refresh = request.COOKIES.get("refresh")
        if not raw_refresh:
            logger.warning("Refresh token missing in cookies")
            return Response({"error": "Refresh token missing"}, status=status.HTTP_401_UNAUTHORIZED)

        try:
            refresh = RefreshToken(raw_refresh)
            user = User.objects.only("id", "username").get(id=refresh.get("user_id"))
            new_access = refresh.access_token
            # Rotate: the old refresh token cannot be replayed
            refresh.blacklist()
            new_refresh = RefreshToken.for_user(user)
        except (TokenError, User.DoesNotExist) as e:
            logger.warning(f"Refresh token error: {e}")
            return Response({"error": "Invalid or expired refresh token"}, status=status.HTTP_401_UNAUTHORIZED)

        logger.info(f"Refreshed tokens for user: {user.username}")
        response = Response({"message": "Tokens refreshed successfully"}, status=status.HTTP_200_OK)
        return set_auth_cookies(response, new_access, new_refresh)


@method_decorator(never_cache, name="dispatch")
class MeApiView(APIView):
    """Returns the authenticated user's identity."""
    authentication_classes = [CookieJWTAuthentication]
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(MeSerializer(request.user).data, status=status.HTTP_200_OK)
