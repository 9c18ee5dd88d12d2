from django.urls import path
from .views import FeedView, PostCreateView, PostDetailView, UserPostsView

urlpatterns = [
    path('p/', FeedView.as_view(), name='feed'),
    path('p/create/', PostCreateView.as_view(), name='post_create'),
    path('p/<int:post_id>/', PostDetailView.as_view(), name='post_detail'),
    path('profile/<int:user_id>/posts/', UserPostsView.as_view(), name='user_posts'),
]
