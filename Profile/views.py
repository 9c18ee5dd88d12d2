import logging
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import IsAuthenticated, AllowAny
from django.conf import settings
from django.views.decorators.cache import never_cache
from django.utils.decorators import method_decorator

from core.images import ImageProcessingError, store_image
from user.authentication import CookieJWTAuthentication
from .exceptions import SocialGraphError
from .permissions import IsProfileOwnerOrReadOnly
from .serializers import ProfileViewSerializer, ProfileUpdateSerializer, UserSummarySerializer
from .services import ProfileFacade

logger = logging.getLogger(__name__)


def _error_response(exc):
    return Response({"error": exc.message}, status=exc.status_code)


@method_decorator(never_cache, name="dispatch")
class ProfileDetailView(APIView):
    authentication_classes = [CookieJWTAuthentication]
    permission_classes = [AllowAny]

    def get(self, request, user_id):
        viewer = request.user if request.user.is_authenticated else None
        try:
            view = ProfileFacade().view_profile(viewer, user_id)
            return Response(ProfileViewSerializer(view.as_dict()).data, status=status.HTTP_200_OK)
        except SocialGraphError as e:
            return _error_response(e)
        except Exception as e:
            logger.exception(f"Error loading profile {user_id}: {e}")
            return Response({"error": "Internal server error"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


@method_decorator(never_cache, name="dispatch")
class FollowView(APIView):
    authentication_classes = [CookieJWTAuthentication]
    permission_classes = [IsAuthenticated]

    def post(self, request, user_id):
        try:
            facade = ProfileFacade()
            following = facade.toggle_follow(request.user, user_id)
            return Response({
                "following": following,
                "followers_count": facade.followers_count(user_id),
            }, status=status.HTTP_200_OK)
        except SocialGraphError as e:
            return _error_response(e)
        except Exception as e:
            logger.exception(f"Error toggling follow {request.user.pk}->{user_id}: {e}")
            return Response({"error": "Internal server error"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


@method_decorator(never_cache, name="dispatch")
class EditProfileView(APIView):
    authentication_classes = [CookieJWTAuthentication]
    permission_classes = [IsAuthenticated, IsProfileOwnerOrReadOnly]

    def put(self, request, user_id):
        return self._update(request, user_id, partial=False)

    def patch(self, request, user_id):
        return self._update(request, user_id, partial=True)

    def _update(self, request, user_id, partial):
        try:
            profile_obj = ProfileFacade().profile_of(user_id)
        except SocialGraphError as e:
            return _error_response(e)
        # Raises PermissionDenied (403) for anyone but the owner
        self.check_object_permissions(request, profile_obj)

        serializer = ProfileUpdateSerializer(profile_obj, data=request.data, partial=partial)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = dict(serializer.validated_data)
        image = data.pop('image', None)
        if image:
            try:
                data["image"] = store_image("profile", image, settings.PROFILE_IMAGE_SIZE)
            except ImageProcessingError as e:
                return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)
            except Exception as upload_error:
                logger.error(f"Profile image upload failed for user {user_id}: {upload_error}")
                return Response({"error": f"Upload failed: {upload_error}"}, status=status.HTTP_502_BAD_GATEWAY)

        try:
            profile_obj = ProfileFacade().update_profile(request.user, profile_obj.user, data)
        except SocialGraphError as e:
            return _error_response(e)
        except Exception as e:
            logger.exception(f"Error updating profile {user_id}: {e}")
            return Response({"error": "Internal server error"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response({
            "message": "Profile updated successfully",
            "title": profile_obj.title,
            "description": profile_obj.description,
            "url": profile_obj.url,
            "image": profile_obj.profile_image(),
        }, status=status.HTTP_200_OK)


class FollowersView(APIView):
    authentication_classes = [CookieJWTAuthentication]
    permission_classes = [AllowAny]

    def get(self, request, user_id):
        try:
            users = ProfileFacade().followers(user_id)
            return Response(UserSummarySerializer(users, many=True).data, status=status.HTTP_200_OK)
        except SocialGraphError as e:
            return _error_response(e)
        except Exception as e:
            logger.exception(f"Error listing followers of {user_id}: {e}")
            return Response({"error": "Internal server error"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


class FollowingView(APIView):
    authentication_classes = [CookieJWTAuthentication]
    permission_classes = [AllowAny]

    def get(self, request, user_id):
        try:
            users = ProfileFacade().following(user_id)
            return Response(UserSummarySerializer(users, many=True).data, status=status.HTTP_200_OK)
        except SocialGraphError as e:
            return _error_response(e)
        except Exception as e:
            logger.exception(f"Error listing following of {user_id}: {e}")
            return Response({"error": "Internal server error"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
