"""
Hoot and comment operations.

Each function takes the authenticated caller (where it matters) and plain
parameters, and either returns the resulting model instance or raises one of
the errors in ``hoots.exceptions``. Views stay thin: they only translate HTTP
into these calls and serialize what comes back.

Authorization rules:

* Only a hoot's author may update or delete it.
* Any authenticated user may comment on any hoot.
* Editing and removing a comment is NOT restricted to the comment's author.
  This matches the behaviour the API has always had and is kept until the
  product decision is made (see DESIGN.md).

Read-check-write sequences are not locked; two concurrent updates of the same
hoot can overwrite each other.
"""

import logging

from django.db import transaction
from django.db.models import Count

from .exceptions import CommentNotFound, HootNotFound
from .models import Comment, Hoot
from .permissions import check_author
from .serializers import CommentSerializer, HootWriteSerializer

logger = logging.getLogger(__name__)


# --- Lookups ---


def _detail_queryset():
    return Hoot.objects.select_related("author").prefetch_related("comments__author")


def _get_hoot(hoot_id, queryset=None):
    queryset = Hoot.objects.all() if queryset is None else queryset
    try:
        return queryset.get(pk=hoot_id)
    except Hoot.DoesNotExist:
        raise HootNotFound()


def _get_comment(hoot, comment_id):
    # Only the hoot's own comments are searched; an id from another hoot
    # is "not found" here.
    try:
        return hoot.comments.get(pk=comment_id)
    except Comment.DoesNotExist:
        raise CommentNotFound()


# --- Hoots ---


def create_hoot(user, data):
    serializer = HootWriteSerializer(data=data)
    serializer.is_valid(raise_exception=True)
    # The author is always the caller, whatever the payload says. The caller
    # object is attached as-is, so no extra query is needed to expand it.
    hoot = serializer.save(author=user)
    logger.info("User %s created hoot %s", user.pk, hoot.pk)
    return hoot


def list_hoots():
    """All hoots, newest first, with authors joined and comments counted."""
    return (
        Hoot.objects.select_related("author")
        .annotate(comment_count=Count("comments"))
        .order_by("-created_at", "-id")
    )


def get_hoot(hoot_id):
    return _get_hoot(hoot_id, _detail_queryset())


def update_hoot(user, hoot_id, data):
    """
    Merge ``data`` onto the hoot if ``user`` wrote it.

    The ownership check runs against the hoot as stored before the update.
    Only the supplied fields change.
    """
    hoot = _get_hoot(hoot_id)
    check_author(user, hoot)

    serializer = HootWriteSerializer(hoot, data=data, partial=True)
    serializer.is_valid(raise_exception=True)
    hoot = serializer.save(author=user)
    logger.info("User %s updated hoot %s", user.pk, hoot.pk)
    return hoot


def delete_hoot(user, hoot_id):
    """Delete the hoot (and its comments) and return it as it was."""
    hoot = _get_hoot(hoot_id, _detail_queryset())
    check_author(user, hoot)

    # The prefetched comments stay on the instance after the rows are gone.
    deleted_id = hoot.pk
    hoot.delete()
    # delete() clears the primary key on the instance
    hoot.pk = deleted_id
    logger.info("User %s deleted hoot %s", user.pk, deleted_id)
    return hoot


# --- Comments ---


def add_comment(user, hoot_id, data):
    hoot = _get_hoot(hoot_id)

    serializer = CommentSerializer(data=data)
    serializer.is_valid(raise_exception=True)
    with transaction.atomic():
        comment = serializer.save(author=user, hoot=hoot)
        hoot.touch()
    logger.info("User %s commented %s on hoot %s", user.pk, comment.pk, hoot.pk)
    return comment


def update_comment(hoot_id, comment_id, data):
    """Overwrite the text of one comment of a hoot."""
    hoot = _get_hoot(hoot_id)
    comment = _get_comment(hoot, comment_id)

    serializer = CommentSerializer(comment, data=data)
    serializer.is_valid(raise_exception=True)
    with transaction.atomic():
        comment = serializer.save()
        hoot.touch()
    logger.info("Updated comment %s on hoot %s", comment.pk, hoot.pk)
    return comment


def remove_comment(hoot_id, comment_id):
    hoot = _get_hoot(hoot_id)
    comment = _get_comment(hoot, comment_id)

    with transaction.atomic():
        comment.delete()
        hoot.touch()
    logger.info("Removed comment %s from hoot %s", comment_id, hoot.pk)
