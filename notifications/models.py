from django.conf import settings
from django.db import models


class Notification(models.Model):
    TYPE_CHOICES = (
        ('Appointment', 'Appointment'),
        ('Urgent', 'Urgent'),
        ('LabResult', 'Lab Result'),
        ('General', 'General'),
    )
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='notifications')
    title = models.CharField(max_length=200)
    message = models.TextField()
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='General')
    is_read = models.BooleanField(default=False)
    link = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.type}: {self.title} -> {self.user_id}"
