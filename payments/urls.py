from django.urls import path
from . import views

urlpatterns = [
    path('', views.PaymentListCreateView.as_view(), name='payment-list'),
    path('stats/', views.PaymentStatsView.as_view(), name='payment-stats'),
    path('patient/<int:patient_id>/', views.PatientPaymentsView.as_view(), name='payment-by-patient'),
    path('<int:pk>/', views.PaymentStatusView.as_view(), name='payment-status'),
]
