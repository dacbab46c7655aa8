from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

doctor_router = SimpleRouter()
doctor_router.register(r'', views.DoctorViewSet, basename='doctor')

department_router = SimpleRouter()
department_router.register(r'', views.DepartmentViewSet, basename='department')

urlpatterns = [
    path('', include(doctor_router.urls)),
]

department_urlpatterns = [
    path('', include(department_router.urls)),
]
