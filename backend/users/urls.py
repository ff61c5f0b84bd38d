from django.urls import path
from rest_framework_simplejwt.views import TokenObtainPairView

from .views import list_users, register_user, user_profile

urlpatterns = [
    path("", list_users, name="users"),
    path("register/", register_user, name="register"),
    path("me/", user_profile, name="me"),
    # Simple JWT issues the access/refresh pair for email + password
    path("login/", TokenObtainPairView.as_view(), name="login"),
]
