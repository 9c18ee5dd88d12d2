from datetime import timedelta

import pytest
from django.core.cache import caches
from django.core.management import call_command
from django.test import override_settings
from django.urls import reverse
from freezegun import freeze_time

from core.tasks import clean_expired_cache, purge_expired_cache_rows

pytestmark = pytest.mark.django_db

DB_CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.db.DatabaseCache",
        "LOCATION": "test_cache_table",
    }
}


def test_non_database_backend_is_left_alone():
    assert purge_expired_cache_rows() is None
    assert clean_expired_cache() is None


@override_settings(CACHES=DB_CACHES)
def test_purges_only_expired_rows():
    call_command("createcachetable")
    cache = caches["default"]

    with freeze_time("2026-03-01 12:00:00") as frozen:
        cache.set("count.followers.1", 3, timeout=30)
        cache.set("count.posts.1", 8, timeout=300)
        frozen.tick(timedelta(seconds=60))

        assert purge_expired_cache_rows() == 1
        assert cache.get("count.posts.1") == 8


def test_cleanup_endpoint_is_admin_only(api_client, u1, make_user):
    api_client.force_authenticate(user=u1)
    assert api_client.post(reverse("cache_cleanup")).status_code == 403

    admin = make_user("admin")
    admin.is_staff = True
    admin.save()
    api_client.force_authenticate(user=admin)
    response = api_client.post(reverse("cache_cleanup"))

    assert response.status_code == 200
    assert response.json()["detail"]["cache_status"] == "Non-DB cache; backend TTL handles expiry"
    assert response.json()["detail"]["jwt_status"] == "flushexpiredtokens executed"
