from rest_framework import serializers
from django.contrib.auth.models import User
from .models import Profile


class ProfileViewSerializer(serializers.Serializer):
    user_id = serializers.IntegerField()
    username = serializers.CharField()
    title = serializers.CharField(allow_blank=True)
    description = serializers.CharField(allow_blank=True)
    url = serializers.CharField(allow_blank=True)
    image = serializers.CharField()
    is_following = serializers.BooleanField()
    can_edit = serializers.BooleanField()
    posts_count = serializers.IntegerField()
    followers_count = serializers.IntegerField()
    following_count = serializers.IntegerField()


# Validates the edit form; the image file itself is handled by the view
class ProfileUpdateSerializer(serializers.ModelSerializer):
    title = serializers.CharField(max_length=255)
    description = serializers.CharField()
    url = serializers.URLField(max_length=255, required=False, allow_blank=True)
    image = serializers.ImageField(required=False, write_only=True)

    class Meta:
        model = Profile
        fields = ['title', 'description', 'url', 'image']


class UserSummarySerializer(serializers.ModelSerializer):
    profile_image = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'username', 'profile_image']

    def get_profile_image(self, obj):
        profile = getattr(obj, 'profile', None)
        return profile.profile_image() if profile else None
