from io import BytesIO
from unittest import mock

import pytest
from django.db import OperationalError
from django.urls import reverse
from PIL import Image

from Profile.models import Follow, Profile
from tests.conftest import make_image_file

pytestmark = pytest.mark.django_db


def follow_url(user):
    return reverse("follow_toggle", args=[user.pk])


def profile_url(user):
    return reverse("profile_detail", args=[user.pk])


class TestProfileDetail:
    def test_anonymous_view(self, api_client, u2):
        response = api_client.get(profile_url(u2))

        assert response.status_code == 200
        body = response.json()
        assert body["username"] == "u2"
        assert body["is_following"] is False
        assert body["can_edit"] is False
        assert body["posts_count"] == 0
        assert body["followers_count"] == 0
        assert body["following_count"] == 0

    def test_owner_sees_edit_flag(self, api_client, u1):
        api_client.force_authenticate(user=u1)
        assert api_client.get(profile_url(u1)).json()["can_edit"] is True

    def test_unknown_user(self, api_client):
        response = api_client.get(reverse("profile_detail", args=[99999]))
        assert response.status_code == 404
        assert "error" in response.json()


class TestFollowToggle:
    def test_requires_authentication(self, api_client, u2):
        response = api_client.post(follow_url(u2))
        assert response.status_code == 401
        assert not Follow.objects.exists()

    def test_toggle_round_trip(self, api_client, u1, u2):
        api_client.force_authenticate(user=u1)

        first = api_client.post(follow_url(u2))
        assert first.status_code == 200
        assert first.json() == {"following": True, "followers_count": 1}
        assert api_client.get(profile_url(u2)).json()["is_following"] is True

        second = api_client.post(follow_url(u2))
        assert second.json() == {"following": False, "followers_count": 0}
        assert api_client.get(profile_url(u2)).json()["is_following"] is False

    def test_counts_refresh_after_toggle(self, api_client, u1, u2):
        assert api_client.get(profile_url(u2)).json()["followers_count"] == 0

        api_client.force_authenticate(user=u1)
        api_client.post(follow_url(u2))

        api_client.force_authenticate(user=None)
        assert api_client.get(profile_url(u2)).json()["followers_count"] == 1
        assert api_client.get(profile_url(u1)).json()["following_count"] == 1

    def test_self_follow_rejected(self, api_client, u1):
        api_client.force_authenticate(user=u1)
        response = api_client.post(follow_url(u1))
        assert response.status_code == 400
        assert response.json()["error"] == "You cannot follow yourself"

    def test_unknown_target(self, api_client, u1):
        api_client.force_authenticate(user=u1)
        assert api_client.post(reverse("follow_toggle", args=[99999])).status_code == 404

    def test_store_failure_returns_503_without_change(self, api_client, u1, u2):
        api_client.force_authenticate(user=u1)
        with mock.patch.object(Follow.objects, "create", side_effect=OperationalError("disk I/O error")):
            response = api_client.post(follow_url(u2))

        assert response.status_code == 503
        assert response.json() == {"error": "Storage is temporarily unavailable"}
        assert not Follow.objects.exists()


class TestFollowLists:
    def test_followers_and_following(self, api_client, make_user):
        a, b, c = make_user("alice"), make_user("bob"), make_user("carol")
        Follow.objects.create(follower=a, followee=c)
        Follow.objects.create(follower=b, followee=c)

        followers = api_client.get(reverse("followers", args=[c.pk])).json()
        assert [u["username"] for u in followers] == ["alice", "bob"]
        assert all(u["profile_image"] for u in followers)

        following = api_client.get(reverse("following", args=[a.pk])).json()
        assert [u["username"] for u in following] == ["carol"]

    def test_unknown_user(self, api_client):
        assert api_client.get(reverse("followers", args=[99999])).status_code == 404


class TestEditProfile:
    def edit_url(self, user):
        return reverse("edit_profile", args=[user.pk])

    def test_owner_update(self, api_client, u1):
        api_client.force_authenticate(user=u1)
        response = api_client.put(
            self.edit_url(u1),
            {"title": "Photographer", "description": "Film only", "url": "https://example.com"},
            format="json",
        )

        assert response.status_code == 200
        profile = Profile.objects.get(user=u1)
        assert profile.title == "Photographer"
        assert profile.description == "Film only"
        assert profile.url == "https://example.com"

    def test_put_requires_title_and_description(self, api_client, u1):
        api_client.force_authenticate(user=u1)
        response = api_client.put(self.edit_url(u1), {"title": "Only a title"}, format="json")
        assert response.status_code == 400
        assert "description" in response.json()

    def test_patch_is_partial(self, api_client, u1):
        api_client.force_authenticate(user=u1)
        response = api_client.patch(self.edit_url(u1), {"description": "Updated"}, format="json")
        assert response.status_code == 200
        assert Profile.objects.get(user=u1).description == "Updated"

    def test_invalid_url(self, api_client, u1):
        api_client.force_authenticate(user=u1)
        response = api_client.patch(self.edit_url(u1), {"url": "not a url"}, format="json")
        assert response.status_code == 400
        assert "url" in response.json()

    def test_non_owner_forbidden(self, api_client, u1, u2):
        api_client.force_authenticate(user=u2)
        response = api_client.patch(self.edit_url(u1), {"title": "Hijacked"}, format="json")
        assert response.status_code == 403
        assert Profile.objects.get(user=u1).title != "Hijacked"

    def test_anonymous_rejected(self, api_client, u1):
        response = api_client.patch(self.edit_url(u1), {"title": "Nope"}, format="json")
        assert response.status_code == 401

    def test_image_upload_is_fitted_to_square(self, api_client, u1, blob_store):
        api_client.force_authenticate(user=u1)
        response = api_client.patch(
            self.edit_url(u1),
            {"image": make_image_file(size=(1600, 900))},
            format="multipart",
        )

        assert response.status_code == 200
        (path, data), = blob_store.items()
        assert path.startswith("profile/photo-")
        assert Image.open(BytesIO(data)).size == (1000, 1000)
        assert Profile.objects.get(user=u1).image == f"https://blob.example.com/{path}"
        assert response.json()["image"] == f"https://blob.example.com/{path}"

    def test_missing_profile_row_is_recreated(self, api_client, u1):
        Profile.objects.filter(user=u1).delete()
        api_client.force_authenticate(user=u1)

        response = api_client.patch(self.edit_url(u1), {"description": "Back again"}, format="json")

        assert response.status_code == 200
        assert Profile.objects.get(user=u1).description == "Back again"

    def test_unknown_user(self, api_client, u1):
        api_client.force_authenticate(user=u1)
        response = api_client.patch(reverse("edit_profile", args=[99999]), {"title": "x"}, format="json")
        assert response.status_code == 404
