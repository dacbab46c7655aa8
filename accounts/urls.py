from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView
from . import views

urlpatterns = [
    # authentication
    path('register/', views.RegisterView.as_view(), name='register'),
    path('login/', views.CustomTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('logout/', views.UserLogoutView.as_view(), name='logout'),

    # user profile
    path('profile/', views.UserProfileView.as_view(), name='user-profile'),
]

admin_urlpatterns = [
    # user management
    path('users/', views.UserListView.as_view(), name='admin-users'),
    path('active-users/', views.ActiveUsersView.as_view(), name='admin-active-users'),
    path('users/<int:user_id>/status/', views.UserStatusView.as_view(), name='admin-user-status'),

    # pharmacists
    path('pharmacists/', views.PharmacistListCreateView.as_view(), name='pharmacist-list'),
    path('pharmacists/by-user/<int:user_id>/', views.PharmacistByUserView.as_view(), name='pharmacist-by-user'),
    path('pharmacists/<int:pk>/', views.PharmacistDeleteView.as_view(), name='pharmacist-delete'),
]
