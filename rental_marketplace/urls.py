"""
URL configuration for rental_marketplace project.
"""
from django.contrib import admin
from django.urls import path
from rest_framework_simplejwt.views import TokenBlacklistView, TokenRefreshView

from core import views


urlpatterns = [
    path('admin/', admin.site.urls),

    # Authentication endpoints
    path('api/auth/register/', views.RegisterView.as_view(), name='user_register'),
    path('api/auth/login/', views.LoginView.as_view(), name='user_login'),
    path('api/auth/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('api/auth/logout/', TokenBlacklistView.as_view(), name='user_logout'),
    path('api/auth/profile/', views.UserProfileView.as_view(), name='user_profile'),

    # Property endpoints
    path('api/properties/', views.PropertyListCreateView.as_view(), name='property_list'),
    path('api/properties/<int:pk>/', views.PropertyDetailView.as_view(), name='property_detail'),
    path('api/properties/<int:pk>/save/', views.PropertySaveView.as_view(), name='property_save'),
    path('api/properties/<int:pk>/saved/', views.PropertySavedStatusView.as_view(), name='property_saved'),

    # Application endpoints
    path('api/applications/', views.ApplicationCreateView.as_view(), name='application_create'),
    path('api/applications/tenant/', views.TenantApplicationListView.as_view(), name='application_tenant_list'),
    path('api/applications/landlord/', views.LandlordApplicationListView.as_view(), name='application_landlord_list'),
    path('api/applications/<int:pk>/status/', views.ApplicationStatusUpdateView.as_view(), name='application_status'),

    # Maintenance endpoints
    path('api/maintenance/', views.MaintenanceRequestCreateView.as_view(), name='maintenance_create'),
    path('api/maintenance/tenant/', views.TenantMaintenanceListView.as_view(), name='maintenance_tenant_list'),
    path('api/maintenance/landlord/', views.LandlordMaintenanceListView.as_view(), name='maintenance_landlord_list'),
    path('api/maintenance/<int:pk>/status/', views.MaintenanceStatusUpdateView.as_view(), name='maintenance_status'),

    # Dashboard endpoints
    path('api/dashboard/tenant/stats/', views.TenantStatsView.as_view(), name='dashboard_tenant_stats'),
    path('api/dashboard/tenant/saved-properties/', views.TenantSavedPropertiesView.as_view(), name='dashboard_tenant_saved'),
    path('api/dashboard/tenant/applications/', views.TenantDashboardApplicationsView.as_view(), name='dashboard_tenant_applications'),
    path('api/dashboard/tenant/notifications/', views.TenantNotificationsView.as_view(), name='dashboard_tenant_notifications'),
    path('api/dashboard/landlord/stats/', views.LandlordStatsView.as_view(), name='dashboard_landlord_stats'),
    path('api/dashboard/landlord/properties/', views.LandlordPropertiesView.as_view(), name='dashboard_landlord_properties'),
    path('api/dashboard/landlord/applications/', views.LandlordDashboardApplicationsView.as_view(), name='dashboard_landlord_applications'),
    path('api/dashboard/landlord/income/', views.LandlordIncomeView.as_view(), name='dashboard_landlord_income'),
    path('api/dashboard/admin/stats/', views.AdminStatsView.as_view(), name='dashboard_admin_stats'),
    path('api/dashboard/admin/users/', views.AdminUsersView.as_view(), name='dashboard_admin_users'),
    path('api/dashboard/admin/properties/', views.AdminPropertiesView.as_view(), name='dashboard_admin_properties'),
    path('api/dashboard/admin/transactions/', views.AdminTransactionsView.as_view(), name='dashboard_admin_transactions'),
]
