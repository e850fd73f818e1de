"""
Hierarchy Serializers
"""

from rest_framework import serializers

from apps.authentication.serializers import AccountSummarySerializer
from .models import Beat, Location, SupervisorRecord


class CreatedByMixin:
    def create(self, validated_data):
        request = self.context.get('request')
        if request and request.user and request.user.is_authenticated:
            validated_data['created_by'] = request.user
        return super().create(validated_data)


class LocationSerializer(CreatedByMixin, serializers.ModelSerializer):
    total_beats = serializers.IntegerField(read_only=True)

    class Meta:
        model = Location
        fields = ['id', 'name', 'address', 'is_active', 'total_beats', 'created_at', 'updated_at']
        read_only_fields = ['id', 'total_beats', 'created_at', 'updated_at']


class BeatSerializer(CreatedByMixin, serializers.ModelSerializer):
    location_name = serializers.CharField(source='location.name', read_only=True)

    class Meta:
        model = Beat
        fields = [
            'id', 'beat_code', 'name', 'description', 'number_of_operators',
            'location', 'location_name', 'is_active', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'location_name', 'created_at', 'updated_at']

    def validate_number_of_operators(self, value):
        if value < 1:
            raise serializers.ValidationError('A beat needs at least one operator.')
        return value

    def validate_location(self, value):
        if self.instance is not None and value != self.instance.location:
            raise serializers.ValidationError('A beat cannot be moved to another location.')
        if self.instance is None and not value.is_active:
            raise serializers.ValidationError('Location is inactive.')
        return value


class SupervisorRecordSerializer(serializers.ModelSerializer):
    account = AccountSummarySerializer(read_only=True)
    registered_by = AccountSummarySerializer(read_only=True)
    decided_by = AccountSummarySerializer(read_only=True)
    location_name = serializers.CharField(source='location.name', read_only=True, default=None)
    general_supervisor_name = serializers.CharField(
        source='general_supervisor.account.full_name', read_only=True, default=None
    )

    class Meta:
        model = SupervisorRecord
        fields = [
            'id', 'account', 'supervisor_type', 'approval_status', 'registered_by',
            'general_supervisor', 'general_supervisor_name', 'location', 'location_name',
            'region_assigned', 'start_date', 'rejection_reason', 'decided_by', 'decided_at',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class SupervisorLocationSerializer(serializers.Serializer):
    location = serializers.UUIDField(allow_null=True)


class GeneralSupervisorLinkSerializer(serializers.Serializer):
    general_supervisor = serializers.UUIDField(allow_null=True)
