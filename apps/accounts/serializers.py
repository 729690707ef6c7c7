from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from django.core.validators import RegexValidator
from .models import User


EMAIL_ERRORS = {
    'invalid': 'Invalid email',
    'blank': 'Invalid email',
    'required': 'Invalid email',
    'null': 'Invalid email',
    'max_length': 'Invalid email',
}

USERNAME_ERRORS = {
    'invalid': 'Invalid username',
    'blank': 'Invalid username',
    'required': 'Invalid username',
    'null': 'Invalid username',
    'min_length': 'Invalid username',
    'max_length': 'Invalid username',
}

username_validator = RegexValidator(r'^[A-Za-z0-9_]+$', message='Invalid username')


class UserSummarySerializer(serializers.ModelSerializer):
    """Public user info embedded in groups and transactions."""

    firstName = serializers.CharField(source='first_name', read_only=True)
    lastName = serializers.CharField(source='last_name', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'username', 'firstName', 'lastName', 'createdAt', 'updatedAt']
        read_only_fields = fields


class UserSerializer(UserSummarySerializer):
    """Full user record, only shown to the user themselves."""

    class Meta:
        model = User
        fields = ['id', 'email', 'username', 'firstName', 'lastName', 'createdAt', 'updatedAt']
        read_only_fields = fields


class UserSearchResultSerializer(serializers.ModelSerializer):
    firstName = serializers.CharField(source='first_name', read_only=True)
    lastName = serializers.CharField(source='last_name', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'username', 'firstName', 'lastName']
        read_only_fields = fields


class UserUpdateSerializer(serializers.Serializer):
    """Serializer for profile updates. Every field is optional."""

    email = serializers.EmailField(required=False, max_length=255, error_messages=EMAIL_ERRORS)
    username = serializers.CharField(
        required=False,
        min_length=3,
        max_length=30,
        validators=[username_validator],
        error_messages=USERNAME_ERRORS,
    )
    firstName = serializers.CharField(source='first_name', required=False, allow_blank=True, max_length=100)
    lastName = serializers.CharField(source='last_name', required=False, allow_blank=True, max_length=100)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError('You must provide at least one field to update')
        return attrs


class UserRegistrationSerializer(UserUpdateSerializer):
    """Serializer for user registration."""

    email = serializers.EmailField(max_length=255, error_messages=EMAIL_ERRORS)
    username = serializers.CharField(
        min_length=3,
        max_length=30,
        validators=[username_validator],
        error_messages=USERNAME_ERRORS,
    )
    password = serializers.CharField(
        write_only=True,
        required=True,
        validators=[validate_password],
        style={'input_type': 'password'}
    )

    def validate(self, attrs):
        return attrs


class UserLoginSerializer(serializers.Serializer):
    """Serializer for user login."""

    email = serializers.EmailField(required=True, error_messages=EMAIL_ERRORS)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )


class TokensSerializer(serializers.Serializer):
    refresh = serializers.CharField()
    access = serializers.CharField()


class AuthResponseSerializer(serializers.Serializer):
    user = UserSerializer()
    tokens = TokensSerializer()
