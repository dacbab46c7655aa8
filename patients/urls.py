from django.urls import path
from . import views

urlpatterns = [
    # patients management
    path('', views.PatientListView.as_view(), name='patient-list'),
    path('create/', views.PatientCreateView.as_view(), name='patient-create'),
    path('by-user/<int:user_id>/', views.PatientByUserView.as_view(), name='patient-by-user'),
    path('<int:pk>/', views.PatientDetailView.as_view(), name='patient-detail'),
]

medical_record_urlpatterns = [
    path('', views.MedicalRecordCreateView.as_view(), name='medical-record-create'),
    path('patient/<int:patient_id>/', views.PatientMedicalRecordsView.as_view(), name='patient-medical-records'),
]

lab_report_urlpatterns = [
    path('', views.LabReportCreateView.as_view(), name='lab-report-create'),
    path('<int:pk>/', views.LabReportResultView.as_view(), name='lab-report-result'),
    path('patient/<int:patient_id>/', views.PatientLabReportsView.as_view(), name='patient-lab-reports'),
]
