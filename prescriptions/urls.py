from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

router = SimpleRouter()
router.register(r'', views.PrescriptionViewSet, basename='prescription')

pharmacy_router = SimpleRouter()
pharmacy_router.register(r'prescriptions', views.PharmacyPrescriptionViewSet, basename='pharmacy-prescription')

urlpatterns = [
    path('', include(router.urls)),
]

pharmacy_urlpatterns = [
    path('', include(pharmacy_router.urls)),
]
