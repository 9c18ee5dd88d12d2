import logging
from dataclasses import dataclass, asdict

from django.conf import settings
from django.contrib.auth.models import User
from django.db import DatabaseError

from posts.models import Post
from .aggregates import AggregateCache, AggregateKey, POSTS, FOLLOWERS, FOLLOWING
from .exceptions import NotFound, SelfFollowError, StoreUnavailable, Unauthorized
from .graph import MembershipGraph, identity_pk
from .models import Profile
from .permissions import can_edit_profile

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ('title', 'description', 'url', 'image')


@dataclass
class ProfileView:
    user_id: int
    username: str
    title: str
    description: str
    url: str
    image: str
    is_following: bool
    can_edit: bool
    posts_count: int
    followers_count: int
    following_count: int

    def as_dict(self):
        return asdict(self)


def _authenticated(actor):
    # AnonymousUser and None both count as "no session"; raw pks are trusted callers
    return actor is not None and getattr(actor, 'is_authenticated', True)


class ProfileFacade:
    """
    Profile reads and the follow toggle, composed from the follow graph and the
    count cache. Callers pass the current actor (a User, a pk, None or AnonymousUser)
    and the subject (a User or a pk).
    """

    def __init__(self, graph=None, cache=None, ttl=None):
        self.graph = graph or MembershipGraph()
        self.cache = cache or AggregateCache()
        self.ttl = settings.PROFILE_COUNT_TTL if ttl is None else ttl

    def _resolve_user(self, identity):
        if isinstance(identity, User):
            return identity
        try:
            return User.objects.get(pk=identity)
        except (User.DoesNotExist, ValueError, TypeError):
            raise NotFound(f"User not found: {identity}")
        except DatabaseError as e:
            logger.error(f"User lookup failed for {identity}: {e}", exc_info=True)
            raise StoreUnavailable() from e

    def _profile_for(self, user):
        # Users created before the post_save hook existed may lack a profile row
        try:
            profile, created = Profile.objects.get_or_create(user=user)
        except DatabaseError as e:
            logger.error(f"Profile lookup failed for user {user.pk}: {e}", exc_info=True)
            raise StoreUnavailable() from e
        if created:
            logger.info(f"Created missing profile for user {user.pk}")
        return profile

    # Cached counts

    def posts_count(self, user):
        user_id = identity_pk(user)

        def compute():
            try:
                return Post.objects.filter(user_id=user_id).count()
            except DatabaseError as e:
                raise StoreUnavailable() from e

        return self.cache.remember(AggregateKey(POSTS, user_id), self.ttl, compute)

    def followers_count(self, user):
        user_id = identity_pk(user)
        return self.cache.remember(
            AggregateKey(FOLLOWERS, user_id), self.ttl, lambda: self.graph.followers_count(user_id)
        )

    def following_count(self, user):
        user_id = identity_pk(user)
        return self.cache.remember(
            AggregateKey(FOLLOWING, user_id), self.ttl, lambda: self.graph.following_count(user_id)
        )

    def invalidate_posts_count(self, user):
        self.cache.invalidate(AggregateKey(POSTS, identity_pk(user)))

    # User-facing actions

    def profile_of(self, subject):
        return self._profile_for(self._resolve_user(subject))

    def view_profile(self, viewer, subject):
        subject = self._resolve_user(subject)
        profile = self._profile_for(subject)
        is_following = self.graph.contains(viewer, subject) if _authenticated(viewer) else False

        return ProfileView(
            user_id=subject.pk,
            username=subject.username,
            title=profile.title,
            description=profile.description,
            url=profile.url,
            image=profile.profile_image(),
            is_following=is_following,
            can_edit=_authenticated(viewer) and can_edit_profile(self._resolve_user(viewer), profile),
            posts_count=self.posts_count(subject),
            followers_count=self.followers_count(subject),
            following_count=self.following_count(subject),
        )

    def toggle_follow(self, actor, target):
        if not _authenticated(actor):
            raise Unauthorized("Authentication required")
        target = self._resolve_user(target)
        actor_id = identity_pk(actor)
        if actor_id == target.pk:
            raise SelfFollowError()

        following = self.graph.toggle(actor_id, target.pk)
        self.cache.invalidate_many([
            AggregateKey(FOLLOWERS, target.pk),
            AggregateKey(FOLLOWING, actor_id),
        ])
        return following

    def update_profile(self, actor, subject, data):
        subject = self._resolve_user(subject)
        profile = self._profile_for(subject)
        if not _authenticated(actor) or not can_edit_profile(self._resolve_user(actor), profile):
            raise Unauthorized("You can only edit your own profile")

        changed = [name for name in EDITABLE_FIELDS if name in data]
        for name in changed:
            setattr(profile, name, data[name])
        if changed:
            try:
                profile.save(update_fields=changed)
            except DatabaseError as e:
                logger.error(f"Profile update failed for user {subject.pk}: {e}", exc_info=True)
                raise StoreUnavailable() from e
        logger.info(f"Profile of user {subject.pk} updated ({', '.join(changed) or 'no changes'})")
        return profile

    def followers(self, subject):
        return User.objects.filter(pk__in=self.graph.followers_of(subject)).select_related('profile').order_by('username')

    def following(self, subject):
        return User.objects.filter(pk__in=self.graph.following_of(subject)).select_related('profile').order_by('username')
