"""Shared fixtures: users, an API client, an in-memory blob store and image uploads."""

import itertools
from io import BytesIO

import pytest
from django.contrib.auth.models import User
from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from PIL import Image
from rest_framework.test import APIClient

PASSWORD = "Sup3rSecret!pw"


def make_image_file(name="photo.png", size=(1600, 900), color=(0, 200, 100)):
    buffer = BytesIO()
    Image.new("RGB", size, color=color).save(buffer, format="PNG")
    return SimpleUploadedFile(name, buffer.getvalue(), content_type="image/png")


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def make_user():
    counter = itertools.count(1)

    def _make(username=None, password=PASSWORD):
        username = username or f"user{next(counter)}"
        return User.objects.create_user(username=username, email=f"{username}@example.com", password=password)

    return _make


@pytest.fixture
def u1(make_user):
    return make_user("u1")


@pytest.fixture
def u2(make_user):
    return make_user("u2")


@pytest.fixture
def blob_store(monkeypatch):
    """Replaces vercel_blob.put; maps stored path -> uploaded bytes."""
    stored = {}

    def fake_put(path, data, options=None):
        stored[path] = data
        return {"url": f"https://blob.example.com/{path}"}

    monkeypatch.setattr("core.images.put", fake_put)
    return stored
