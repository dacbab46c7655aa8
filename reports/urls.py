from django.urls import path
from . import views

urlpatterns = [
    path('analytics/', views.AnalyticsView.as_view(), name='admin-analytics'),

    # excel exports
    path('reports/generate/', views.ReportGenerateView.as_view(), name='report-generate'),
    path('reports/', views.ReportListView.as_view(), name='report-list'),
    path('reports/<int:report_id>/status/', views.ReportStatusView.as_view(), name='report-status'),
    path('reports/<int:report_id>/download/', views.ReportDownloadView.as_view(), name='report-download'),
]

dashboard_urlpatterns = [
    path('stats/', views.DashboardStatsView.as_view(), name='dashboard-stats'),
    path('recent/', views.RecentActivityView.as_view(), name='dashboard-recent'),
    path('doctor/<int:doctor_id>/', views.DoctorDashboardView.as_view(), name='dashboard-doctor'),
]
