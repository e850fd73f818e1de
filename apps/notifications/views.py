"""Notification ViewSets"""

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework import filters, mixins, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.core.exceptions import NotFoundError
from apps.core.permissions import IsActiveAccount

from .filters import NotificationFilter
from .models import Notification
from .serializers import MarkAllReadSerializer, NotificationSerializer, UnreadCountSerializer
from .services import NotificationService


class NotificationViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """The caller's notification inbox"""

    queryset = Notification.objects.none()
    serializer_class = NotificationSerializer
    permission_classes = [IsActiveAccount]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = NotificationFilter
    search_fields = ['subject', 'body']
    ordering_fields = ['created_at', 'read_at']
    ordering = ['-created_at']

    def get_queryset(self):
        return NotificationService.inbox(self.request.user).order_by('-created_at')

    @extend_schema(request=None, responses=NotificationSerializer)
    @action(detail=True, methods=['post'], url_path='read')
    def mark_read(self, request, pk=None):
        notification = NotificationService.mark_as_read(pk, request.user)
        if notification is None:
            raise NotFoundError('Notification', pk)
        return Response(self.get_serializer(notification).data)

    @extend_schema(request=None, responses=MarkAllReadSerializer)
    @action(detail=False, methods=['post'], url_path='read-all')
    def mark_all_read(self, request):
        updated = NotificationService.mark_all_as_read(request.user)
        return Response({'updated': updated})

    @extend_schema(responses=UnreadCountSerializer)
    @action(detail=False, methods=['get'], url_path='unread-count')
    def unread_count(self, request):
        return Response({'unread_count': NotificationService.unread_count(request.user)})
