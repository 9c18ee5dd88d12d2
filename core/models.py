from django.db import models


class DatabaseCache(models.Model):
    """Read-only view of the cache table created by `manage.py createcachetable`."""
    cache_key = models.CharField(max_length=255, primary_key=True)
    value = models.TextField()
    expires = models.DateTimeField()

    class Meta:
        db_table = 'my_cache_table'   # must match CACHES["default"]["LOCATION"]
        managed = False
        verbose_name = "Database Cache"
        verbose_name_plural = "Database Caches"

    def __str__(self):
        return self.cache_key

    @property
    def metric_key(self):
        # Stored keys look like "<KEY_PREFIX>:<version>:count.followers.42"
        return self.cache_key.rsplit(":", 1)[-1]
