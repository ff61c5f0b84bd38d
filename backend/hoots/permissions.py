import logging

from .exceptions import NotHootAuthor

logger = logging.getLogger(__name__)


def is_author(user, obj):
    """True when ``user`` wrote ``obj`` (a Hoot or a Comment)."""
    return user is not None and obj.author_id == user.pk


def check_author(user, obj):
    """
    Raise ``NotHootAuthor`` unless ``user`` is the author of ``obj``.

    Unlike a DRF permission class this takes the caller directly, so the
    hoot services can run it without a request. Staff get no bypass.
    """
    if not is_author(user, obj):
        logger.warning(
            "User %s refused on %s %s owned by %s",
            getattr(user, "pk", None),
            obj._meta.model_name,
            obj.pk,
            obj.author_id,
        )
        raise NotHootAuthor()
