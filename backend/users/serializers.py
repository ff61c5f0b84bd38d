from rest_framework import serializers
from rest_framework_simplejwt.tokens import RefreshToken
from django.contrib.auth import get_user_model, password_validation
from django.contrib.auth.hashers import make_password

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    full_name = serializers.SerializerMethodField()

    # Password is accepted on input only, never echoed back
    password = serializers.CharField(
        write_only=True,
        required=True,
        style={"input_type": "password"},
    )

    class Meta:
        model = User
        fields = (
            "id",
            "email",
            "first_name",
            "last_name",
            "full_name",
            "is_staff",
            "is_active",
            "created_at",
            "password",
        )
        # Account flags are managed by admins, not through the public API
        read_only_fields = ["id", "full_name", "is_staff", "is_active", "created_at"]

    def get_full_name(self, obj):
        return obj.get_full_name()

    def validate_password(self, value):
        # Runs the AUTH_PASSWORD_VALIDATORS from settings
        password_validation.validate_password(value)
        return value

    def create(self, validated_data):
        return User.objects.create_user(**validated_data)

    def update(self, instance, validated_data):
        # Hash a new password up front so the parent update saves everything
        # in a single database call.
        raw_password = validated_data.pop("password", None)
        if raw_password:
            validated_data["password"] = make_password(raw_password)

        return super().update(instance, validated_data)


class UserSerializerWithToken(UserSerializer):
    token = serializers.SerializerMethodField(read_only=True)

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ("token",)

    def get_token(self, obj):
        token = RefreshToken.for_user(obj)
        return str(token.access_token)
