"""
Assignment ViewSets - operator placements on beats
"""

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import filters, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.authentication.models import User
from apps.core.exceptions import AuthorizationError
from apps.core.permissions import IsActiveAccount, role_required
from .filters import AssignmentFilter
from .models import Assignment
from .serializers import AssignmentRequestSerializer, AssignmentSerializer, UnassignSerializer
from .services import AssignmentEngine

CanAssign = role_required(*AssignmentEngine.ASSIGNER_ROLES)

STATUS_PARAMETER = OpenApiParameter(
    'status', str, enum=[choice for choice, _ in Assignment.STATUS_CHOICES], required=False
)


class AssignmentViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Assignments are created, changed and ended through the engine;
    operators only see their own.
    """

    serializer_class = AssignmentSerializer
    permission_classes = [IsActiveAccount]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = AssignmentFilter
    search_fields = ['operator__first_name', 'operator__last_name', 'operator__employee_id', 'beat__beat_code']
    ordering_fields = ['start_date', 'created_at']
    ordering = ['-start_date', '-created_at']

    def get_queryset(self):
        queryset = Assignment.objects.select_related(
            'operator', 'beat', 'location', 'supervisor__account', 'assigned_by'
        )
        if self.request.user.role == User.ROLE_OPERATOR:
            return queryset.filter(operator=self.request.user)
        return queryset

    def get_permissions(self):
        if self.action in ('create', 'change', 'unassign'):
            return [CanAssign()]
        return super().get_permissions()

    @extend_schema(request=AssignmentRequestSerializer, responses={201: AssignmentSerializer})
    def create(self, request, *args, **kwargs):
        serializer = AssignmentRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        assignment = AssignmentEngine.assign(request.user, serializer.to_request())
        return Response(self.get_serializer(assignment).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=AssignmentRequestSerializer, responses=AssignmentSerializer)
    @action(detail=False, methods=['post'])
    def change(self, request):
        """Transfer the operator's active assignment to a new beat or supervisor"""
        serializer = AssignmentRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        assignment = AssignmentEngine.change_assignment(request.user, serializer.to_request())
        return Response(self.get_serializer(assignment).data)

    @extend_schema(request=UnassignSerializer, responses=AssignmentSerializer)
    @action(detail=True, methods=['post'])
    def unassign(self, request, pk=None):
        serializer = UnassignSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        assignment = AssignmentEngine.unassign(request.user, pk, serializer.validated_data['end_date'])
        return Response(self.get_serializer(assignment).data)

    @extend_schema(parameters=[STATUS_PARAMETER])
    @action(detail=False, methods=['get'], url_path=r'by-operator/(?P<operator_id>[0-9a-f-]+)')
    def by_operator(self, request, operator_id=None):
        user = request.user
        if user.role == User.ROLE_OPERATOR and str(user.pk) != operator_id:
            raise AuthorizationError("Operators can only view their own assignments")
        queryset = AssignmentEngine.get_assignments_by_operator(operator_id, request.query_params.get('status'))
        return self._paginated(queryset)

    @extend_schema(parameters=[STATUS_PARAMETER])
    @action(detail=False, methods=['get'], url_path=r'by-beat/(?P<beat_id>[0-9a-f-]+)')
    def by_beat(self, request, beat_id=None):
        queryset = AssignmentEngine.get_assignments_by_beat(beat_id, request.query_params.get('status'))
        if request.user.role == User.ROLE_OPERATOR:
            queryset = queryset.filter(operator=request.user)
        return self._paginated(queryset)

    def _paginated(self, queryset):
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(queryset, many=True).data)
