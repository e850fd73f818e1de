"""
Approval Serializers
"""

from rest_framework import serializers

from apps.authentication.serializers import AccountSummarySerializer
from apps.hierarchy.models import SupervisorRecord
from apps.hierarchy.serializers import SupervisorRecordSerializer
from .models import ApprovalAction
from .services import RegistrationPayload


class RegistrationSubmitSerializer(serializers.Serializer):
    """Validate registration submissions; role rules live in the engine"""

    supervisor_type = serializers.ChoiceField(choices=SupervisorRecord.TYPE_CHOICES)
    first_name = serializers.CharField(max_length=50)
    last_name = serializers.CharField(max_length=50)
    email = serializers.EmailField()
    phone = serializers.RegexField(
        r'^\+?[0-9]\d{6,14}$', max_length=15, required=False, allow_blank=True, default=''
    )
    address = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    region_assigned = serializers.CharField(max_length=150, required=False, allow_blank=True, default='')
    location_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    general_supervisor_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    start_date = serializers.DateField(required=False, allow_null=True, default=None)

    def to_payload(self) -> RegistrationPayload:
        data = self.validated_data
        return RegistrationPayload(
            supervisor_type=data['supervisor_type'],
            first_name=data['first_name'],
            last_name=data['last_name'],
            email=data['email'].lower(),
            phone=data['phone'],
            address=data['address'],
            region_assigned=data['region_assigned'],
            location_id=data['location_id'],
            general_supervisor_id=data['general_supervisor_id'],
            start_date=data['start_date'],
        )


class DecisionSerializer(serializers.Serializer):
    decision = serializers.ChoiceField(choices=[('approve', 'Approve'), ('reject', 'Reject')])
    reason = serializers.CharField(required=False, allow_blank=True, default='')


class ApprovalActionSerializer(serializers.ModelSerializer):
    actor = AccountSummarySerializer(read_only=True)

    class Meta:
        model = ApprovalAction
        fields = ['id', 'action', 'actor', 'comments', 'created_at']
        read_only_fields = fields


class RegistrationSerializer(SupervisorRecordSerializer):
    actions = ApprovalActionSerializer(many=True, read_only=True)

    class Meta(SupervisorRecordSerializer.Meta):
        fields = SupervisorRecordSerializer.Meta.fields + ['actions']
        read_only_fields = fields


class CredentialsSerializer(serializers.Serializer):
    employee_id = serializers.CharField()
    email = serializers.EmailField()
    temporary_password = serializers.CharField()


class DecisionResultSerializer(serializers.Serializer):
    registration = RegistrationSerializer()
    credentials = CredentialsSerializer(allow_null=True)


class ApprovalStatsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    pending = serializers.IntegerField()
    approved = serializers.IntegerField()
    rejected = serializers.IntegerField()
    pending_general_supervisor = serializers.IntegerField()
    pending_supervisor = serializers.IntegerField()
    approved_general_supervisor = serializers.IntegerField()
    approved_supervisor = serializers.IntegerField()
    approved_today = serializers.IntegerField()
    rejected_today = serializers.IntegerField()
    approved_this_week = serializers.IntegerField()
