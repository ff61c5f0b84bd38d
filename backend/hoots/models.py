from django.db import models
from django.conf import settings

User = settings.AUTH_USER_MODEL


class Hoot(models.Model):
    class Category(models.TextChoices):
        NEWS = "News"
        SPORTS = "Sports"
        GAMES = "Games"
        MOVIES = "Movies"
        MUSIC = "Music"
        TELEVISION = "Television"

    # A hoot always has an author; deleting the user removes their hoots.
    author = models.ForeignKey(User, on_delete=models.CASCADE, related_name="hoots")

    title = models.CharField(max_length=200)
    text = models.TextField()
    category = models.CharField(
        max_length=20,
        choices=Category.choices,
        default=Category.NEWS,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        verbose_name = "Hoot"
        verbose_name_plural = "Hoots"

    def __str__(self):
        return self.title

    def touch(self):
        """Persist the hoot itself after one of its comments changed."""
        self.save(update_fields=["updated_at"])


class Comment(models.Model):
    # on_delete=CASCADE: comments live inside their hoot and go with it.
    hoot = models.ForeignKey(Hoot, on_delete=models.CASCADE, related_name="comments")
    author = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name="hoot_comments"
    )

    text = models.TextField()

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        # Insertion order
        ordering = ["created_at", "id"]
        verbose_name = "Comment"
        verbose_name_plural = "Comments"

    def __str__(self):
        text_snippet = self.text[:50].replace("\n", " ")
        return f"Comment: '{text_snippet}' on Hoot: '{self.hoot.title[:30]}'"
