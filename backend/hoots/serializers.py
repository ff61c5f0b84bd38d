from rest_framework import serializers
from django.contrib.auth import get_user_model
from .models import Hoot, Comment

User = get_user_model()

# --- Helper Serializers ---


class AuthorSerializer(serializers.ModelSerializer):
    """Profile of a hoot or comment author, used in place of the bare id."""

    full_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ("id", "email", "first_name", "last_name", "full_name", "created_at")
        read_only_fields = fields

    def get_full_name(self, obj):
        return obj.get_full_name()


# ------------------------------------
# --- Comment Serializer ---
# ------------------------------------


class CommentSerializer(serializers.ModelSerializer):
    # Only 'text' is writable; the hoot and author come from the URL and caller.
    author = AuthorSerializer(read_only=True)

    class Meta:
        model = Comment
        fields = ("id", "author", "text", "created_at", "updated_at")
        read_only_fields = ("id", "author", "created_at", "updated_at")


# ------------------------------------
# --- Hoot Serializers ---
# ------------------------------------


# ----------------- 1. LIST SERIALIZER -----------------
class HootListSerializer(serializers.ModelSerializer):
    author = AuthorSerializer(read_only=True)
    comment_count = serializers.SerializerMethodField()

    class Meta:
        model = Hoot
        fields = (
            "id",
            "author",
            "title",
            "text",
            "category",
            "comment_count",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields

    def get_comment_count(self, obj):
        # list_hoots() annotates the count; single hoots have their comments loaded
        count = getattr(obj, "comment_count", None)
        if count is None:
            count = len(obj.comments.all())
        return count


# ----------------- 2. DETAIL SERIALIZER -----------------
class HootDetailSerializer(HootListSerializer):
    comments = CommentSerializer(many=True, read_only=True)

    class Meta(HootListSerializer.Meta):
        fields = HootListSerializer.Meta.fields + ("comments",)
        read_only_fields = fields


# ----------------- 3. WRITE SERIALIZER -----------------
class HootWriteSerializer(serializers.ModelSerializer):
    """
    Input for creating and updating a hoot.

    'author' is not a field here; the services always set it to the caller,
    and an 'author' key in the payload is ignored.
    """

    class Meta:
        model = Hoot
        fields = ("title", "text", "category")
