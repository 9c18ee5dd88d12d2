from rest_framework import serializers
from Profile.serializers import UserSummarySerializer
from .models import Post


class PostSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)

    class Meta:
        model = Post
        fields = ['id', 'user', 'caption', 'image', 'created_at']
        read_only_fields = fields


class PostCreateSerializer(serializers.Serializer):
    caption = serializers.CharField()
    image = serializers.ImageField()
