from rest_framework import serializers
from .models import Partner


class PartnerSerializer(serializers.ModelSerializer):
    """Partner profile with the current aggregate balance."""

    display_name = serializers.CharField(source='get_display_name', read_only=True)

    class Meta:
        model = Partner
        fields = [
            'id',
            'email',
            'full_name',
            'display_name',
            'balance',
            'is_staff',
            'created_at',
        ]
        read_only_fields = fields


class PartnerMinimalSerializer(serializers.ModelSerializer):
    """Compact partner reference for nested output."""

    display_name = serializers.CharField(source='get_display_name', read_only=True)

    class Meta:
        model = Partner
        fields = ['id', 'email', 'display_name']
        read_only_fields = fields


class LoginSerializer(serializers.Serializer):
    """Serializer for partner login."""

    email = serializers.EmailField(required=True)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )
