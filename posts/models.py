from django.db import models
from django.contrib.auth.models import User


class Post(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='posts')
    caption = models.TextField()
    # Blob storage URL of the fitted image
    image = models.CharField(max_length=500)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    def __str__(self):
        return f"Post {self.pk} by {self.user_id}"

    class Meta:
        ordering = ['-created_at', '-id']
        # Profile grids and the feed both list one author's posts newest first
        indexes = [
            models.Index(fields=['user', 'created_at'], name='post_user_created_idx'),
        ]
