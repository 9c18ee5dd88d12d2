import logging
from contextlib import contextmanager

from django.contrib.auth.models import User
from django.db import DatabaseError, IntegrityError, transaction

from .exceptions import NotFound, StoreUnavailable
from .models import Follow

logger = logging.getLogger(__name__)


def identity_pk(identity):
    """Accept either a User instance or a raw primary key."""
    return getattr(identity, 'pk', identity)


@contextmanager
def _store_errors(operation):
    try:
        yield
    except DatabaseError as e:
        logger.error(f"Follow store failure during {operation}: {e}", exc_info=True)
        raise StoreUnavailable() from e


class MembershipGraph:
    """
    Who-follows-whom, stored as one Follow row per ordered (follower, followee) pair.

    Every method accepts User instances or primary keys and raises NotFound when
    either side is not a known user. Store failures surface as StoreUnavailable
    and never leave a half-applied change behind.
    """

    # Retries for a toggle that loses the unique-constraint race to a concurrent insert
    max_attempts = 3

    def _ensure_known(self, *identities):
        ids = {identity_pk(i) for i in identities}
        found = set(User.objects.filter(pk__in=ids).values_list('pk', flat=True))
        missing = ids - found
        if missing:
            raise NotFound(f"User not found: {', '.join(str(pk) for pk in sorted(missing, key=str))}")

    def _lock_follower(self, follower_id):
        # Row lock on the follower serializes every toggle that follower issues
        locked = list(User.objects.select_for_update().filter(pk=follower_id).values_list('pk', flat=True))
        if not locked:
            raise NotFound(f"User not found: {follower_id}")

    def toggle(self, follower, followee):
        """Flip the edge and return the new state (True means now following)."""
        follower_id, followee_id = identity_pk(follower), identity_pk(followee)
        with _store_errors("toggle"):
            self._ensure_known(follower_id, followee_id)
            for attempt in range(1, self.max_attempts + 1):
                try:
                    with transaction.atomic():
                        self._lock_follower(follower_id)
                        deleted, _ = Follow.objects.filter(follower_id=follower_id, followee_id=followee_id).delete()
                        if deleted:
                            following = False
                        else:
                            Follow.objects.create(follower_id=follower_id, followee_id=followee_id)
                            following = True
                except IntegrityError:
                    # Someone else inserted the same edge first; replay the toggle against it
                    logger.info(f"Toggle {follower_id}->{followee_id} raced an insert (attempt {attempt}), retrying")
                    continue
                logger.info(f"User {follower_id} {'followed' if following else 'unfollowed'} user {followee_id}")
                return following
        raise StoreUnavailable(f"Toggle {follower_id}->{followee_id} did not settle after {self.max_attempts} attempts")

    def add(self, follower, followee):
        """Create the edge if missing. Returns True when a row was inserted."""
        follower_id, followee_id = identity_pk(follower), identity_pk(followee)
        with _store_errors("add"):
            self._ensure_known(follower_id, followee_id)
            with transaction.atomic():
                _, created = Follow.objects.get_or_create(follower_id=follower_id, followee_id=followee_id)
        return created

    def remove(self, follower, followee):
        """Delete the edge if present. Returns True when a row was deleted."""
        follower_id, followee_id = identity_pk(follower), identity_pk(followee)
        with _store_errors("remove"):
            self._ensure_known(follower_id, followee_id)
            with transaction.atomic():
                deleted, _ = Follow.objects.filter(follower_id=follower_id, followee_id=followee_id).delete()
        return bool(deleted)

    def contains(self, follower, followee):
        follower_id, followee_id = identity_pk(follower), identity_pk(followee)
        with _store_errors("contains"):
            self._ensure_known(follower_id, followee_id)
            return Follow.objects.filter(follower_id=follower_id, followee_id=followee_id).exists()

    def followers_of(self, target):
        target_id = identity_pk(target)
        with _store_errors("followers_of"):
            self._ensure_known(target_id)
            return set(Follow.objects.filter(followee_id=target_id).values_list('follower_id', flat=True))

    def following_of(self, actor):
        actor_id = identity_pk(actor)
        with _store_errors("following_of"):
            self._ensure_known(actor_id)
            return set(Follow.objects.filter(follower_id=actor_id).values_list('followee_id', flat=True))

    # Count queries feed the aggregate cache; callers have already resolved the user
    def followers_count(self, target):
        with _store_errors("followers_count"):
            return Follow.objects.filter(followee_id=identity_pk(target)).count()

    def following_count(self, actor):
        with _store_errors("following_count"):
            return Follow.objects.filter(follower_id=identity_pk(actor)).count()
