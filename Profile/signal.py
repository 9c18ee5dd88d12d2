import logging

from django.contrib.auth.models import User
from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import Profile

logger = logging.getLogger(__name__)


@receiver(post_save, sender=User)
def create_profile_for_new_user(sender, instance, created, **kwargs):
    """Every user gets exactly one profile, created alongside the account."""
    if not created or kwargs.get('raw'):
        return
    Profile.objects.get_or_create(user=instance, defaults={'title': instance.username})
    logger.info(f"Profile created for new user {instance.username}")
