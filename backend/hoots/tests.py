from datetime import timedelta
from unittest import mock

from django.contrib.auth import get_user_model
from django.db import DatabaseError
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.test import APIClient

from . import services
from .exceptions import CommentNotFound, HootNotFound, NotHootAuthor
from .models import Comment, Hoot

User = get_user_model()

HOOT_LIST_CREATE_URL = reverse("hoot-list-create")


def hoot_detail_url(hoot_id):
    return reverse("hoot-detail", kwargs={"pk": hoot_id})


def comment_create_url(hoot_id):
    return reverse("comment-create", kwargs={"pk": hoot_id})


def comment_detail_url(hoot_id, comment_id):
    return reverse("comment-detail", kwargs={"pk": hoot_id, "comment_pk": comment_id})


# --- Helper Functions for Test Setup ---


def create_user(**params):
    defaults = {"password": "password123"}
    defaults.update(params)
    return User.objects.create_user(**defaults)


def create_hoot(user, **params):
    defaults = {
        "title": "Default hoot title",
        "text": "Default hoot text.",
        "category": Hoot.Category.NEWS,
    }
    defaults.update(params)
    return Hoot.objects.create(author=user, **defaults)


def create_comment(user, hoot, **params):
    defaults = {"text": "Default comment text."}
    defaults.update(params)
    return Comment.objects.create(author=user, hoot=hoot, **defaults)


# ----------------------------------------------------------------------
# A. Service tests (the access rules without HTTP)
# ----------------------------------------------------------------------


class HootServiceTests(TestCase):
    def setUp(self):
        self.alice = create_user(email="alice@test.com", first_name="Alice")
        self.bob = create_user(email="bob@test.com", first_name="Bob")

    def test_create_sets_caller_as_author(self):
        hoot = services.create_hoot(
            self.alice, {"title": "t", "text": "x", "author": self.bob.pk}
        )

        self.assertEqual(hoot.author, self.alice)
        hoot.refresh_from_db()
        self.assertEqual(hoot.author_id, self.alice.pk)

    def test_create_then_get_round_trip(self):
        created = services.create_hoot(self.alice, {"title": "t", "text": "x"})

        hoot = services.get_hoot(created.pk)

        self.assertEqual(hoot.title, "t")
        self.assertEqual(hoot.text, "x")
        self.assertEqual(hoot.author.pk, self.alice.pk)
        self.assertEqual(hoot.category, Hoot.Category.NEWS)

    def test_create_rejects_missing_text(self):
        with self.assertRaises(ValidationError):
            services.create_hoot(self.alice, {"title": "t"})
        self.assertFalse(Hoot.objects.exists())

    def test_get_missing_hoot_raises_not_found(self):
        with self.assertRaises(HootNotFound):
            services.get_hoot(9999)

    def test_list_is_newest_first(self):
        first = create_hoot(self.alice, title="first")
        second = create_hoot(self.bob, title="second")
        third = create_hoot(self.alice, title="third")
        # Creation times out of id order
        now = timezone.now()
        Hoot.objects.filter(pk=first.pk).update(created_at=now - timedelta(hours=1))
        Hoot.objects.filter(pk=second.pk).update(created_at=now - timedelta(hours=3))
        Hoot.objects.filter(pk=third.pk).update(created_at=now - timedelta(hours=2))

        ids = [hoot.pk for hoot in services.list_hoots()]

        self.assertEqual(ids, [first.pk, third.pk, second.pk])

    def test_list_counts_comments(self):
        busy = create_hoot(self.alice, title="busy")
        quiet = create_hoot(self.bob, title="quiet")
        create_comment(self.bob, busy)
        create_comment(self.alice, busy)

        counts = {hoot.pk: hoot.comment_count for hoot in services.list_hoots()}

        self.assertEqual(counts, {busy.pk: 2, quiet.pk: 0})

    def test_update_by_author_merges_fields(self):
        hoot = create_hoot(self.alice, title="keep me", text="old")

        updated = services.update_hoot(self.alice, hoot.pk, {"text": "new"})

        self.assertEqual(updated.text, "new")
        hoot.refresh_from_db()
        self.assertEqual(hoot.text, "new")
        self.assertEqual(hoot.title, "keep me")

    def test_update_ignores_author_in_payload(self):
        hoot = create_hoot(self.alice)

        services.update_hoot(self.alice, hoot.pk, {"author": self.bob.pk, "text": "y"})

        hoot.refresh_from_db()
        self.assertEqual(hoot.author_id, self.alice.pk)

    def test_update_by_non_author_is_forbidden_and_changes_nothing(self):
        hoot = create_hoot(self.alice, text="original")

        with self.assertRaises(NotHootAuthor):
            services.update_hoot(self.bob, hoot.pk, {"text": "hijacked"})

        self.assertEqual(services.get_hoot(hoot.pk).text, "original")

    def test_update_missing_hoot_raises_not_found(self):
        with self.assertRaises(HootNotFound):
            services.update_hoot(self.alice, 9999, {"text": "x"})

    def test_delete_by_author_returns_prior_state(self):
        hoot = create_hoot(self.alice, title="bye")
        comment = create_comment(self.bob, hoot)

        deleted = services.delete_hoot(self.alice, hoot.pk)

        self.assertEqual(deleted.pk, hoot.pk)
        self.assertEqual(deleted.title, "bye")
        self.assertEqual([c.pk for c in deleted.comments.all()], [comment.pk])
        self.assertFalse(Hoot.objects.filter(pk=hoot.pk).exists())
        self.assertFalse(Comment.objects.filter(pk=comment.pk).exists())

    def test_delete_by_non_author_is_forbidden(self):
        hoot = create_hoot(self.alice)

        with self.assertRaises(NotHootAuthor):
            services.delete_hoot(self.bob, hoot.pk)

        self.assertTrue(Hoot.objects.filter(pk=hoot.pk).exists())

    def test_staff_get_no_bypass(self):
        admin = User.objects.create_superuser(email="admin@test.com", password="pw")
        hoot = create_hoot(self.alice)

        with self.assertRaises(NotHootAuthor):
            services.delete_hoot(admin, hoot.pk)

    def test_any_user_can_comment_and_it_is_appended(self):
        hoot = create_hoot(self.alice)
        create_comment(self.alice, hoot, text="one")

        comment = services.add_comment(self.bob, hoot.pk, {"text": "two"})

        self.assertEqual(comment.author, self.bob)
        texts = list(hoot.comments.values_list("text", flat=True))
        self.assertEqual(texts, ["one", "two"])

    def test_add_comment_ignores_author_in_payload(self):
        hoot = create_hoot(self.alice)

        comment = services.add_comment(
            self.bob, hoot.pk, {"text": "hi", "author": self.alice.pk}
        )

        comment.refresh_from_db()
        self.assertEqual(comment.author_id, self.bob.pk)

    def assert_comment_change_touches_hoot(self, hoot, change):
        long_ago = timezone.now() - timedelta(days=30)
        Hoot.objects.filter(pk=hoot.pk).update(updated_at=long_ago)

        change()

        hoot.refresh_from_db()
        self.assertGreater(hoot.updated_at, long_ago)

    def test_add_comment_touches_the_hoot(self):
        hoot = create_hoot(self.alice)

        self.assert_comment_change_touches_hoot(
            hoot, lambda: services.add_comment(self.bob, hoot.pk, {"text": "hi"})
        )

    def test_update_comment_touches_the_hoot(self):
        hoot = create_hoot(self.alice)
        comment = create_comment(self.bob, hoot)

        self.assert_comment_change_touches_hoot(
            hoot,
            lambda: services.update_comment(hoot.pk, comment.pk, {"text": "edited"}),
        )

    def test_remove_comment_touches_the_hoot(self):
        hoot = create_hoot(self.alice)
        comment = create_comment(self.bob, hoot)

        self.assert_comment_change_touches_hoot(
            hoot, lambda: services.remove_comment(hoot.pk, comment.pk)
        )

    def test_add_comment_to_missing_hoot_raises_not_found(self):
        with self.assertRaises(HootNotFound):
            services.add_comment(self.bob, 9999, {"text": "hi"})

    def test_update_comment_changes_only_text(self):
        hoot = create_hoot(self.alice)
        comment = create_comment(self.bob, hoot, text="before")

        services.update_comment(
            hoot.pk, comment.pk, {"text": "after", "author": self.alice.pk}
        )

        comment.refresh_from_db()
        self.assertEqual(comment.text, "after")
        self.assertEqual(comment.author_id, self.bob.pk)

    def test_update_comment_of_other_hoot_raises_not_found(self):
        hoot = create_hoot(self.alice)
        other = create_hoot(self.alice, title="other")
        comment = create_comment(self.bob, other)

        with self.assertRaises(CommentNotFound):
            services.update_comment(hoot.pk, comment.pk, {"text": "x"})

    def test_update_comment_on_missing_hoot_raises_not_found(self):
        with self.assertRaises(HootNotFound):
            services.update_comment(9999, 1, {"text": "x"})

    def test_remove_comment_keeps_order_of_the_rest(self):
        hoot = create_hoot(self.alice)
        c1 = create_comment(self.bob, hoot, text="c1")
        c2 = create_comment(self.alice, hoot, text="c2")
        c3 = create_comment(self.bob, hoot, text="c3")

        services.remove_comment(hoot.pk, c2.pk)

        self.assertEqual(
            list(hoot.comments.values_list("pk", flat=True)), [c1.pk, c3.pk]
        )

    def test_remove_missing_comment_raises_not_found(self):
        hoot = create_hoot(self.alice)

        with self.assertRaises(CommentNotFound):
            services.remove_comment(hoot.pk, 9999)


# ----------------------------------------------------------------------
# B. Hoot API Tests
# ----------------------------------------------------------------------


class HootAPITests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.author = create_user(
            email="author@test.com", first_name="Ada", last_name="Author"
        )
        self.other_user = create_user(email="other@test.com", first_name="Otto")
        self.client.force_authenticate(user=self.author)

        self.hoot = create_hoot(self.author, title="Existing hoot", text="old text")
        self.payload = {
            "title": "New hoot",
            "text": "Something worth hooting about.",
            "category": "Music",
        }

    def test_anonymous_requests_are_unauthorized(self):
        self.client.force_authenticate(user=None)

        self.assertEqual(
            self.client.get(HOOT_LIST_CREATE_URL).status_code,
            status.HTTP_401_UNAUTHORIZED,
        )
        res = self.client.post(HOOT_LIST_CREATE_URL, self.payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_create_hoot_returns_expanded_author(self):
        payload = dict(self.payload, author=self.other_user.pk)
        res = self.client.post(HOOT_LIST_CREATE_URL, payload, format="json")

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["author"]["id"], self.author.pk)
        self.assertEqual(res.data["author"]["email"], "author@test.com")
        self.assertEqual(res.data["author"]["full_name"], "Ada Author")
        self.assertEqual(res.data["category"], "Music")
        self.assertEqual(res.data["comments"], [])

    def test_create_hoot_invalid_category_is_bad_request(self):
        payload = dict(self.payload, category="Poetry")
        res = self.client.post(HOOT_LIST_CREATE_URL, payload, format="json")

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("category", res.data)

    def test_list_hoots_newest_first_with_authors(self):
        newer = create_hoot(self.other_user, title="Newer hoot")

        res = self.client.get(HOOT_LIST_CREATE_URL)

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual([h["id"] for h in res.data], [newer.pk, self.hoot.pk])
        self.assertEqual(res.data[0]["author"]["id"], self.other_user.pk)
        self.assertEqual(res.data[1]["comment_count"], 0)

    def test_retrieve_hoot_includes_comments_with_authors(self):
        create_comment(self.other_user, self.hoot, text="Nice hoot")

        res = self.client.get(hoot_detail_url(self.hoot.pk))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["author"]["id"], self.author.pk)
        self.assertEqual(len(res.data["comments"]), 1)
        self.assertEqual(res.data["comments"][0]["author"]["id"], self.other_user.pk)

    def test_retrieve_missing_hoot_is_404(self):
        res = self.client.get(hoot_detail_url(9999))

        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(res.data["detail"], "Hoot not found.")

    def test_retrieve_out_of_range_hoot_id_is_404(self):
        res = self.client.get(hoot_detail_url(99999999999999999999999))

        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(res.data["detail"], "Hoot not found.")

    def test_update_hoot_by_non_author_forbidden_then_author_succeeds(self):
        self.client.force_authenticate(user=self.other_user)
        res = self.client.put(
            hoot_detail_url(self.hoot.pk), {"text": "hijacked"}, format="json"
        )
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
        self.hoot.refresh_from_db()
        self.assertEqual(self.hoot.text, "old text")

        self.client.force_authenticate(user=self.author)
        res = self.client.put(
            hoot_detail_url(self.hoot.pk), {"text": "new"}, format="json"
        )
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["text"], "new")
        self.assertEqual(res.data["author"]["id"], self.author.pk)
        self.hoot.refresh_from_db()
        self.assertEqual(self.hoot.text, "new")

    def test_patch_hoot_by_author(self):
        res = self.client.patch(
            hoot_detail_url(self.hoot.pk), {"title": "Renamed"}, format="json"
        )

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.hoot.refresh_from_db()
        self.assertEqual(self.hoot.title, "Renamed")

    def test_delete_hoot_by_author_returns_deleted_hoot(self):
        res = self.client.delete(hoot_detail_url(self.hoot.pk))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["id"], self.hoot.pk)
        self.assertEqual(res.data["title"], "Existing hoot")
        self.assertFalse(Hoot.objects.filter(pk=self.hoot.pk).exists())

    def test_delete_hoot_by_non_author_forbidden(self):
        self.client.force_authenticate(user=self.other_user)

        res = self.client.delete(hoot_detail_url(self.hoot.pk))

        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(Hoot.objects.filter(pk=self.hoot.pk).exists())

    def test_database_error_is_persistence_failure(self):
        with mock.patch.object(
            services, "list_hoots", side_effect=DatabaseError("disk I/O error")
        ):
            with self.assertLogs("hoots", level="ERROR"):
                res = self.client.get(HOOT_LIST_CREATE_URL)

        self.assertEqual(res.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(res.data["detail"].code, "persistence_failure")


# ----------------------------------------------------------------------
# C. Comment API Tests
# ----------------------------------------------------------------------


class CommentAPITests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.hoot_author = create_user(email="hooter@test.com")
        self.commenter = create_user(email="commenter@test.com", first_name="C")
        self.other_user = create_user(email="otheruser@test.com", first_name="O")

        self.hoot = create_hoot(self.hoot_author, title="Hoot with comments")
        self.comment = create_comment(self.commenter, self.hoot, text="First!")

    def test_create_comment_on_someone_elses_hoot(self):
        self.client.force_authenticate(user=self.commenter)

        res = self.client.post(
            comment_create_url(self.hoot.pk), {"text": "Another one"}, format="json"
        )

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["author"]["id"], self.commenter.pk)
        self.assertEqual(res.data["text"], "Another one")
        self.assertEqual(self.hoot.comments.count(), 2)
        self.assertEqual(self.hoot.comments.last().pk, res.data["id"])

    def test_create_comment_anonymous_unauthorized(self):
        res = self.client.post(
            comment_create_url(self.hoot.pk), {"text": "anon"}, format="json"
        )
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_create_comment_on_missing_hoot_is_404(self):
        self.client.force_authenticate(user=self.commenter)

        res = self.client.post(comment_create_url(9999), {"text": "x"}, format="json")

        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_create_comment_without_text_is_bad_request(self):
        self.client.force_authenticate(user=self.commenter)

        res = self.client.post(comment_create_url(self.hoot.pk), {}, format="json")

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_comment_acknowledges(self):
        self.client.force_authenticate(user=self.commenter)

        res = self.client.put(
            comment_detail_url(self.hoot.pk, self.comment.pk),
            {"text": "Edited"},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data, {"message": "Ok"})
        self.comment.refresh_from_db()
        self.assertEqual(self.comment.text, "Edited")

    def test_update_comment_by_non_author_is_allowed(self):
        # No comment-author check on edits; see DESIGN.md.
        self.client.force_authenticate(user=self.other_user)

        res = self.client.patch(
            comment_detail_url(self.hoot.pk, self.comment.pk),
            {"text": "Not mine"},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.comment.refresh_from_db()
        self.assertEqual(self.comment.text, "Not mine")
        self.assertEqual(self.comment.author_id, self.commenter.pk)

    def test_update_missing_comment_is_404(self):
        self.client.force_authenticate(user=self.commenter)

        res = self.client.put(
            comment_detail_url(self.hoot.pk, 9999), {"text": "x"}, format="json"
        )

        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(res.data["detail"], "Comment not found.")

    def test_remove_comment_preserves_order(self):
        second = create_comment(self.other_user, self.hoot, text="Second")
        third = create_comment(self.hoot_author, self.hoot, text="Third")
        self.client.force_authenticate(user=self.other_user)

        res = self.client.delete(comment_detail_url(self.hoot.pk, second.pk))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data, {"message": "Ok"})
        detail = self.client.get(hoot_detail_url(self.hoot.pk))
        self.assertEqual(
            [c["id"] for c in detail.data["comments"]], [self.comment.pk, third.pk]
        )

    def test_remove_comment_by_non_author_is_allowed(self):
        # No comment-author check on removal either; see DESIGN.md.
        self.client.force_authenticate(user=self.other_user)

        res = self.client.delete(comment_detail_url(self.hoot.pk, self.comment.pk))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data, {"message": "Ok"})
        self.assertFalse(Comment.objects.filter(pk=self.comment.pk).exists())

    def test_remove_comment_on_missing_hoot_is_404(self):
        self.client.force_authenticate(user=self.commenter)

        res = self.client.delete(comment_detail_url(9999, self.comment.pk))

        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
        self.assertTrue(Comment.objects.filter(pk=self.comment.pk).exists())
