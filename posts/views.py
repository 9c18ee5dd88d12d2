import logging
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.pagination import PageNumberPagination
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.permissions import IsAuthenticated, AllowAny
from django.conf import settings
from django.contrib.auth.models import User
from django.views.decorators.cache import never_cache
from django.utils.decorators import method_decorator

from core.images import ImageProcessingError, store_image
from Profile.exceptions import SocialGraphError
from Profile.graph import MembershipGraph
from Profile.services import ProfileFacade
from user.authentication import CookieJWTAuthentication
from .models import Post
from .serializers import PostSerializer, PostCreateSerializer

logger = logging.getLogger(__name__)


def _posts():
    return Post.objects.select_related('user', 'user__profile')


@method_decorator(never_cache, name="dispatch")
class FeedView(APIView):
    """Newest posts from the accounts the caller follows, paginated."""
    authentication_classes = [CookieJWTAuthentication]
    permission_classes = [IsAuthenticated]

    def get(self, request):
        try:
            following_ids = MembershipGraph().following_of(request.user)
            queryset = _posts().filter(user_id__in=following_ids)

            paginator = PageNumberPagination()
            page = paginator.paginate_queryset(queryset, request, view=self)
            serializer = PostSerializer(page, many=True)
            return paginator.get_paginated_response(serializer.data)
        except SocialGraphError as e:
            return Response({"error": e.message}, status=e.status_code)
        except APIException:
            raise
        except Exception as e:
            logger.exception(f"Error loading feed for user {request.user.pk}: {e}")
            return Response({"error": "Internal server error"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


@method_decorator(never_cache, name="dispatch")
class PostCreateView(APIView):
    parser_classes = (MultiPartParser, FormParser)
    authentication_classes = [CookieJWTAuthentication]
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = PostCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        user = request.user
        try:
            image_url = store_image("posts", serializer.validated_data["image"], settings.POST_IMAGE_SIZE)
        except ImageProcessingError as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except Exception as upload_error:
            logger.error(f"Post image upload failed for user {user.pk}: {upload_error}")
            return Response({"error": f"Upload failed: {upload_error}"}, status=status.HTTP_502_BAD_GATEWAY)

        try:
            post = Post.objects.create(user=user, caption=serializer.validated_data["caption"], image=image_url)
            ProfileFacade().invalidate_posts_count(user)
            logger.info(f"Post {post.pk} created by {user.username}")
            return Response(PostSerializer(post).data, status=status.HTTP_201_CREATED)
        except Exception as e:
            logger.exception(f"Error creating post for user {user.pk}: {e}")
            return Response({"error": "Internal server error"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


class PostDetailView(APIView):
    authentication_classes = [CookieJWTAuthentication]
    permission_classes = [AllowAny]

    def get(self, request, post_id):
        post = _posts().filter(pk=post_id).first()
        if not post:
            return Response({"error": "Post not found"}, status=status.HTTP_404_NOT_FOUND)

        data = PostSerializer(post).data
        viewer = request.user
        try:
            data["follows_author"] = (
                viewer.is_authenticated
                and viewer.pk != post.user_id
                and MembershipGraph().contains(viewer, post.user_id)
            )
        except SocialGraphError as e:
            return Response({"error": e.message}, status=e.status_code)
        return Response(data, status=status.HTTP_200_OK)


class UserPostsView(APIView):
    authentication_classes = [CookieJWTAuthentication]
    permission_classes = [AllowAny]

    def get(self, request, user_id):
        try:
            if not User.objects.filter(pk=user_id).exists():
                return Response({"error": "User not found"}, status=status.HTTP_404_NOT_FOUND)

            queryset = _posts().filter(user_id=user_id)
            paginator = PageNumberPagination()
            page = paginator.paginate_queryset(queryset, request, view=self)
            serializer = PostSerializer(page, many=True)
            return paginator.get_paginated_response(serializer.data)
        except APIException:
            raise
        except Exception as e:
            logger.exception(f"Error listing posts of user {user_id}: {e}")
            return Response({"error": "Internal server error"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
