from django.urls import path
from .views import ProfileDetailView, EditProfileView, FollowView, FollowersView, FollowingView

urlpatterns = [
    path('profile/<int:user_id>/', ProfileDetailView.as_view(), name='profile_detail'),
    path('profile/<int:user_id>/edit/', EditProfileView.as_view(), name='edit_profile'),
    path('profile/<int:user_id>/followers/', FollowersView.as_view(), name='followers'),
    path('profile/<int:user_id>/following/', FollowingView.as_view(), name='following'),
    path('follow/<int:user_id>/', FollowView.as_view(), name='follow_toggle'),
]
