from django.contrib import admin
from .models import DatabaseCache


@admin.register(DatabaseCache)
class DatabaseCacheAdmin(admin.ModelAdmin):
    list_display = ('metric_key', 'value_truncated', 'expires')
    search_fields = ('cache_key',)
    list_filter = ('expires',)
    list_per_page = 50

    def value_truncated(self, obj):
        # Values are pickled and base64-encoded; only a preview is useful here
        v = obj.value or ""
        if len(v) > 120:
            v = v[:120] + "…"
        return v
    value_truncated.short_description = 'value'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
