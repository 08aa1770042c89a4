"""
Serializers for the users app.

Registration, email + password login returning SimpleJWT tokens, and the
customer's own account details with billing fields.
"""
from __future__ import annotations

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.contrib.auth.validators import UnicodeUsernameValidator
from django.db import transaction
from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.validators import UniqueValidator
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .customers import get_profile
from .models import CustomerProfile

User = get_user_model()

BILLING_FIELDS = [
    "billing_phone",
    "billing_address_1",
    "billing_city",
    "billing_state",
    "billing_postcode",
    "billing_country",
]


class CustomerProfileSerializer(serializers.ModelSerializer):
    hubspot_synced = serializers.BooleanField(source="is_synced", read_only=True)

    class Meta:
        model = CustomerProfile
        fields = BILLING_FIELDS + ["hubspot_synced", "synced_at"]
        read_only_fields = ["hubspot_synced", "synced_at"]


class MeSerializer(serializers.ModelSerializer):
    """The logged-in customer; names and billing fields are writable."""

    billing = CustomerProfileSerializer(source="customer_profile", required=False)

    class Meta:
        model = User
        fields = ["id", "username", "email", "first_name", "last_name", "is_staff", "date_joined", "billing"]
        read_only_fields = ["id", "username", "email", "is_staff", "date_joined"]

    def to_representation(self, instance):
        get_profile(instance)
        return super().to_representation(instance)

    @transaction.atomic
    def update(self, instance, validated_data):
        billing = validated_data.pop("customer_profile", None)
        if billing:
            profile = get_profile(instance)
            for attr, val in billing.items():
                setattr(profile, attr, val)
            profile.save()

        for attr, val in validated_data.items():
            setattr(instance, attr, val)
        # triggers the HubSpot contact update
        instance.save()
        return instance


class RegisterSerializer(serializers.ModelSerializer):
    username = serializers.CharField(
        min_length=3,
        max_length=150,
        validators=[UnicodeUsernameValidator(), UniqueValidator(queryset=User.objects.all())],
    )
    email = serializers.EmailField(
        validators=[UniqueValidator(queryset=User.objects.all(), lookup="iexact")],
    )
    password = serializers.CharField(write_only=True, style={"input_type": "password"})
    password2 = serializers.CharField(write_only=True, style={"input_type": "password"})
    first_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    last_name = serializers.CharField(max_length=150, required=False, allow_blank=True)

    class Meta:
        model = User
        fields = ["id", "username", "email", "password", "password2", "first_name", "last_name"]
        read_only_fields = ["id"]

    def validate_username(self, value: str) -> str:
        if value.isdigit():
            raise serializers.ValidationError("Username cannot be only numbers.")
        if "@" in value:
            raise serializers.ValidationError("Username cannot be an email address.")
        return value

    def validate_email(self, value: str) -> str:
        return value.strip().lower()

    def validate(self, attrs):
        if attrs["password"] != attrs["password2"]:
            raise serializers.ValidationError({"password": "Passwords do not match."})

        pseudo_user = User(username=attrs.get("username"), email=attrs.get("email"))
        validate_password(attrs["password"], user=pseudo_user)
        return attrs

    def create(self, validated_data):
        validated_data.pop("password2")
        password = validated_data.pop("password")
        user = User(**validated_data)
        user.set_password(password)
        user.save()
        return user


class EmailTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    Login using email + password and return SimpleJWT refresh/access tokens.
    POST body: {"email": "...", "password": "..."}
    """

    email = serializers.EmailField(write_only=True)
    password = serializers.CharField(write_only=True, trim_whitespace=False)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields.pop(self.username_field, None)

    def validate(self, attrs):
        user = User.objects.filter(email__iexact=attrs.get("email")).first()
        if user is None or not user.check_password(attrs.get("password")):
            raise AuthenticationFailed("No active account found with the given credentials")
        if not user.is_active:
            raise AuthenticationFailed("User account is disabled")

        refresh = self.get_token(user)
        return {"refresh": str(refresh), "access": str(refresh.access_token)}
