from django.urls import path

from .views import comment_create, comment_detail, hoot_detail, hoot_list_create

urlpatterns = [
    # ----------------------------------------------------------------------
    # 1. HOOT Endpoints
    # ----------------------------------------------------------------------
    # Endpoint: /api/hoots/
    # Methods: GET (List all hoots, newest first), POST (Create hoot)
    path("", hoot_list_create, name="hoot-list-create"),
    # Endpoint: /api/hoots/<int:pk>/
    # Methods: GET (Retrieve), PUT/PATCH (Update - author only), DELETE (author only)
    path("<int:pk>/", hoot_detail, name="hoot-detail"),
    # ----------------------------------------------------------------------
    # 2. COMMENT Endpoints (nested under their hoot)
    # ----------------------------------------------------------------------
    # Endpoint: /api/hoots/<int:pk>/comments/
    # Methods: POST (Any authenticated user may comment)
    path("<int:pk>/comments/", comment_create, name="comment-create"),
    # Endpoint: /api/hoots/<int:pk>/comments/<int:comment_pk>/
    # Methods: PUT/PATCH (Edit text), DELETE (Remove)
    path(
        "<int:pk>/comments/<int:comment_pk>/",
        comment_detail,
        name="comment-detail",
    ),
]
