from rest_framework.views import APIView
from rest_framework.response import Response
from django.views.decorators.cache import never_cache
from django.utils.decorators import method_decorator
from rest_framework import status
from rest_framework.permissions import IsAdminUser
from django.core.management import call_command
from django.db import DatabaseError
import logging

from user.authentication import CookieJWTAuthentication
from .tasks import purge_expired_cache_rows

logger = logging.getLogger(__name__)


@method_decorator(never_cache, name="dispatch")
class ExpiredCleanupView(APIView):
    authentication_classes = [CookieJWTAuthentication]
    permission_classes = [IsAdminUser]

    def post(self, request):
        details = {}

        try:
            deleted = purge_expired_cache_rows()
        except DatabaseError as e:
            logger.error("Cache purge failed: %s", e, exc_info=True)
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        if deleted is None:
            details["cache_status"] = "Non-DB cache; backend TTL handles expiry"
        else:
            details["cache_deleted"] = deleted

        # Expired refresh tokens pile up in the blacklist tables
        try:
            call_command("flushexpiredtokens")
            details["jwt_status"] = "flushexpiredtokens executed"
        except Exception as e:
            logger.error("flushexpiredtokens failed: %s", e, exc_info=True)
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response({"detail": details}, status=status.HTTP_200_OK)
