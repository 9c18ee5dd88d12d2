from django.contrib import admin
from .models import Post


@admin.register(Post)
class PostAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'caption', 'created_at')
    list_select_related = ('user',)
    search_fields = ('user__username', 'caption')
    list_filter = ('created_at',)
    list_per_page = 50
