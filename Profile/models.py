from django.conf import settings
from django.db import models
from django.contrib.auth.models import User


class Profile(models.Model):
    # One profile per user; created by the post_save hook in Profile/signal.py
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='profile')
    title = models.CharField(max_length=255, blank=True, default="")
    description = models.TextField(blank=True, default="")
    url = models.URLField(max_length=255, blank=True, default="")
    # Blob storage URL; empty means "use the default image"
    image = models.CharField(max_length=500, blank=True, default="")

    def __str__(self):
        return self.user.username

    def profile_image(self):
        return self.image or settings.DEFAULT_PROFILE_IMAGE


class Follow(models.Model):
    follower = models.ForeignKey(User, on_delete=models.CASCADE, related_name='following_edges')
    followee = models.ForeignKey(User, on_delete=models.CASCADE, related_name='follower_edges')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Follow(follower={self.follower_id}, followee={self.followee_id})"

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['follower', 'followee'], name='unique_follow_edge'),
        ]
        # The unique constraint covers follower-first lookups; followers_of needs followee-first
        indexes = [
            models.Index(fields=['followee', 'follower'], name='follow_followee_idx'),
        ]
