import logging

from celery import shared_task
from django.conf import settings
from django.db import connections, transaction
from django.utils.timezone import now

logger = logging.getLogger(__name__)

DB_CACHE_BACKEND = "django.core.cache.backends.db.DatabaseCache"


def purge_expired_cache_rows(alias=None):
    """
    Delete expired rows from the database cache table backing the count cache.
    Returns the number of rows removed, or None for non-database backends
    (those expire entries on their own).
    """
    alias = alias or settings.AGGREGATE_CACHE_ALIAS
    conf = settings.CACHES.get(alias, {})
    if conf.get("BACKEND") != DB_CACHE_BACKEND:
        return None

    connection = connections["default"]
    table = connection.ops.quote_name(conf["LOCATION"])
    with transaction.atomic(), connection.cursor() as cursor:
        cursor.execute(f"DELETE FROM {table} WHERE expires < %s", [connection.ops.adapt_datetimefield_value(now())])
        deleted = cursor.rowcount
    logger.info(f"Purged {deleted} expired cache rows from {conf['LOCATION']}")
    return deleted


@shared_task
def clean_expired_cache():
    return purge_expired_cache_rows()
