from rest_framework import serializers


class LoginSerializer(serializers.Serializer):
    """Accepts ``username`` or ``email`` together with ``password``."""
    username = serializers.CharField(required=False, allow_blank=True)
    email = serializers.CharField(required=False, allow_blank=True)
    password = serializers.CharField(trim_whitespace=False)

    def validate(self, attrs):
        account = (attrs.get('username') or attrs.get('email') or '').strip()
        if not account:
            raise serializers.ValidationError({'username': ['Username or email is required.']})
        attrs['account'] = account
        return attrs


class LogoutSerializer(serializers.Serializer):
    refresh = serializers.CharField(required=False)
