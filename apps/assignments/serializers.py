"""
Assignment Serializers
"""

from rest_framework import serializers

from apps.authentication.serializers import AccountSummarySerializer
from .models import Assignment
from .services import AssignmentRequest


class AssignmentSerializer(serializers.ModelSerializer):
    operator = AccountSummarySerializer(read_only=True)
    assigned_by = AccountSummarySerializer(read_only=True)
    beat_code = serializers.CharField(source='beat.beat_code', read_only=True)
    location_name = serializers.CharField(source='location.name', read_only=True)
    supervisor_name = serializers.CharField(source='supervisor.account.full_name', read_only=True)

    class Meta:
        model = Assignment
        fields = [
            'id', 'operator', 'beat', 'beat_code', 'supervisor', 'supervisor_name',
            'location', 'location_name', 'shift_type', 'assignment_type', 'status',
            'start_date', 'end_date', 'special_instructions', 'transfer_reason',
            'replaces', 'assigned_by', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class AssignmentRequestSerializer(serializers.Serializer):
    """Input for assign and change; location always comes from the beat"""

    operator = serializers.UUIDField()
    beat = serializers.UUIDField()
    supervisor = serializers.UUIDField()
    shift_type = serializers.ChoiceField(choices=Assignment.SHIFT_CHOICES, default=Assignment.SHIFT_DAY)
    assignment_type = serializers.ChoiceField(choices=Assignment.TYPE_CHOICES, default=Assignment.TYPE_PERMANENT)
    start_date = serializers.DateField(required=False, allow_null=True, default=None)
    end_date = serializers.DateField(required=False, allow_null=True, default=None)
    special_instructions = serializers.CharField(required=False, allow_blank=True, default='')
    transfer_reason = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, attrs):
        if attrs['start_date'] and attrs['end_date'] and attrs['end_date'] < attrs['start_date']:
            raise serializers.ValidationError({'end_date': 'End date cannot be before the start date'})
        return attrs

    def to_request(self) -> AssignmentRequest:
        data = self.validated_data
        return AssignmentRequest(
            operator_id=data['operator'],
            beat_id=data['beat'],
            supervisor_id=data['supervisor'],
            shift_type=data['shift_type'],
            assignment_type=data['assignment_type'],
            start_date=data['start_date'],
            end_date=data['end_date'],
            special_instructions=data['special_instructions'],
            transfer_reason=data['transfer_reason'],
        )


class UnassignSerializer(serializers.Serializer):
    end_date = serializers.DateField(required=False, allow_null=True, default=None)
