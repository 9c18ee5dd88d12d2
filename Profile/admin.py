from django.contrib import admin
from .models import Profile, Follow


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'title', 'image')
    list_select_related = ('user',)
    search_fields = ('user__username', 'user__email', 'title')


@admin.register(Follow)
class FollowAdmin(admin.ModelAdmin):
    list_display = ('follower', 'followee', 'created_at')
    list_select_related = ('follower', 'followee')
    search_fields = ('follower__username', 'followee__username')
    list_filter = ('created_at',)
    raw_id_fields = ('follower', 'followee')
