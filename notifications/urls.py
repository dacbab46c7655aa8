from django.urls import path
from . import views

urlpatterns = [
    path('', views.NotificationInboxView.as_view(), name='notification-inbox'),
    path('read-all/', views.NotificationReadAllView.as_view(), name='notification-read-all'),
    path('<int:pk>/read/', views.NotificationReadView.as_view(), name='notification-read'),
]
