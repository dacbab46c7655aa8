import logging

from drf_spectacular.utils import extend_schema
from rest_framework import generics, status, views

from accounts.permissions import IsAdmin
from HospitalBackend.exceptions import NotFound
from HospitalBackend.responses import success, success_list
from .models import Notification
from .serializers import NotificationSerializer

logger = logging.getLogger(__name__)

INBOX_SIZE = 20


class NotificationInboxView(generics.ListCreateAPIView):
    """
    GET: the caller's latest notifications.
    POST: admins push a notification to any user.
    """
    serializer_class = NotificationSerializer

    def get_permissions(self):
        if self.request.method == 'POST':
            return [IsAdmin()]
        return super().get_permissions()

    def list(self, request, *args, **kwargs):
        notifications = Notification.objects.filter(user=request.user).order_by('-created_at', '-id')[:INBOX_SIZE]
        data = self.get_serializer(notifications, many=True).data
        unread = Notification.objects.filter(user=request.user, is_read=False).count()
        return success(data, count=len(data), unread=unread)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        notification = serializer.save()
        logger.info(f"Notification {notification.pk} created by {request.user.email}")
        return success(serializer.data, status=status.HTTP_201_CREATED)


class NotificationReadView(views.APIView):
    """Marks one of the caller's notifications as read."""

    @extend_schema(request=None, responses={200: NotificationSerializer})
    def patch(self, request, pk):
        try:
            notification = Notification.objects.get(pk=pk, user=request.user)
        except Notification.DoesNotExist:
            raise NotFound('Notification not found')
        notification.is_read = True
        notification.save(update_fields=['is_read'])
        return success(NotificationSerializer(notification).data)


class NotificationReadAllView(views.APIView):

    @extend_schema(request=None, responses={200: None})
    def patch(self, request):
        updated = Notification.objects.filter(user=request.user, is_read=False).update(is_read=True)
        return success(message=f"{updated} notification(s) marked as read")
