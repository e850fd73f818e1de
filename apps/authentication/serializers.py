"""
Authentication Serializers
"""

from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .models import User


class WorkforceTokenObtainPairSerializer(TokenObtainPairSerializer):
    """JWT pair carrying the caller's role and employee id as claims."""

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['role'] = user.role
        token['employee_id'] = user.employee_id
        return token

    def validate(self, attrs):
        data = super().validate(attrs)
        data['user'] = UserSerializer(self.user).data
        return data


class AccountSummarySerializer(serializers.ModelSerializer):
    """Compact account representation nested in other resources"""

    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = ['id', 'email', 'employee_id', 'full_name', 'role', 'status']
        read_only_fields = fields


class UserSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)
    registered_by = AccountSummarySerializer(read_only=True)

    class Meta:
        model = User
        fields = [
            'id', 'email', 'employee_id', 'first_name', 'last_name', 'full_name',
            'phone', 'address', 'role', 'status', 'must_change_password',
            'registered_by', 'date_joined', 'updated_at',
        ]
        read_only_fields = fields
