from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

from accounts.urls import admin_urlpatterns as account_admin_urls
from doctors.urls import department_urlpatterns
from patients.urls import lab_report_urlpatterns, medical_record_urlpatterns
from prescriptions.urls import pharmacy_urlpatterns
from reports.urls import dashboard_urlpatterns

urlpatterns = [
    path('admin/', admin.site.urls),

    path('api/auth/', include('accounts.urls')),
    path('api/admin/', include(account_admin_urls)),
    path('api/admin/', include('reports.urls')),
    path('api/dashboard/', include(dashboard_urlpatterns)),

    path('api/patients/', include('patients.urls')),
    path('api/medical-records/', include(medical_record_urlpatterns)),
    path('api/lab-reports/', include(lab_report_urlpatterns)),
    path('api/doctors/', include('doctors.urls')),
    path('api/departments/', include(department_urlpatterns)),
    path('api/appointments/', include('appointments.urls')),
    path('api/prescriptions/', include('prescriptions.urls')),
    path('api/pharmacy/', include(pharmacy_urlpatterns)),
    path('api/payments/', include('payments.urls')),
    path('api/notifications/', include('notifications.urls')),

    # api schema
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
