from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from finance.models import User
from finance.services.users import split_name

ROLES = [c for c, _ in User.ROLE_CHOICES]


class UserCreateSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=2, max_length=100)
    email = serializers.EmailField()
    username = serializers.CharField(max_length=150, required=False)
    password = serializers.CharField(trim_whitespace=False, write_only=True)
    role = serializers.ChoiceField(choices=ROLES)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True)
    department = serializers.CharField(max_length=100, required=False, allow_blank=True)

    def validate_email(self, v):
        return v.strip().lower()

    def validate_password(self, v):
        validate_password(v)
        return v


class UserUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=2, max_length=100, required=False)
    email = serializers.EmailField(required=False)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True)
    department = serializers.CharField(max_length=100, required=False, allow_blank=True)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError('Nothing to update.')
        return attrs

    def to_model_values(self) -> dict:
        values = dict(self.validated_data)
        if 'name' in values:
            values['first_name'], values['last_name'] = split_name(values.pop('name'))
        if 'email' in values:
            values['email'] = values['email'].strip().lower()
        return values


class RoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=ROLES)


class UserListQuerySerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=ROLES, required=False)
    isActive = serializers.ChoiceField(choices=['true', 'false'], required=False)
    search = serializers.CharField(max_length=100, required=False, allow_blank=True)
    page = serializers.IntegerField(min_value=1, required=False)
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False)

    def active_filter(self):
        value = self.validated_data.get('isActive')
        return None if value is None else value == 'true'


def format_account(user: User) -> dict:
    return {
        'id': user.id,
        'username': user.username,
        'name': user.get_full_name() or user.username,
        'email': user.email,
        'role': user.role,
        'hospitalId': user.hospital_id,
        'phone': user.phone,
        'department': user.department,
        'isActive': user.is_active,
        'lastLogin': user.last_login,
        'createdAt': user.date_joined,
    }


def format_activity(event) -> dict:
    return {
        'id': event.id,
        'action': event.action,
        'objectType': event.object_type,
        'objectId': event.object_id,
        'detail': event.detail,
        'createdAt': event.created_at,
    }
