"""
API views for the Rental Marketplace.

Views authenticate and authorize the request, validate the body with a
serializer and hand the acting user to ``core.services`` explicitly.
Errors are raised as REST framework exceptions and rendered as
``{"message": ...}`` by ``core.exceptions.api_exception_handler``.
"""

import logging

from django.contrib.auth import get_user_model
from django.db import IntegrityError
from rest_framework import status
from rest_framework.generics import ListAPIView
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from . import dashboard, services
from .exceptions import Conflict
from .permissions import IsAdminRole, IsLandlord, IsTenant
from .serializers import (
    ApplicationCreateSerializer,
    ApplicationSerializer,
    ApplicationStatusSerializer,
    LoginSerializer,
    MaintenanceRequestCreateSerializer,
    MaintenanceRequestSerializer,
    MaintenanceStatusSerializer,
    NotificationSerializer,
    PropertyFilterSerializer,
    PropertySerializer,
    SavedStatusSerializer,
    TransactionSerializer,
    UserProfileUpdateSerializer,
    UserRegistrationSerializer,
    UserSerializer,
)
from .tokens import issue_tokens

User = get_user_model()
logger = logging.getLogger(__name__)


def get_client_ip(request):
    """
    Get client IP address from request.
    Handles proxy headers for accurate IP detection.
    """
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        return x_forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


# ============================================================================
# Authentication
# ============================================================================

class RegisterView(APIView):
    """
    API endpoint for user registration.

    POST /api/auth/register/
    Request body: {
        "email": "user@example.com",
        "password": "S3curePassw0rd!",
        "name": "Jane Doe",
        "role": "tenant"
    }

    Success response (201):
    {
        "message": "User created successfully",
        "token": "<jwt_access_token>",
        "refresh": "<jwt_refresh_token>",
        "user": {"id": 1, "email": "...", "name": "...", "role": "tenant", ...}
    }

    Error responses:
    - 400: "User already exists", or validation errors (weak password,
      unsupported role)
    - 429: Rate limit exceeded
    """
    permission_classes = [AllowAny]
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = 'register'

    def post(self, request, *args, **kwargs):
        serializer = UserRegistrationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            user = serializer.save()
        except IntegrityError:
            # Concurrent registration with the same email
            raise Conflict('User already exists')

        logger.info(
            f"User registered. Email: {user.email}, Role: {user.role}, "
            f"IP: {get_client_ip(request)}"
        )

        return Response({
            'message': 'User created successfully',
            **issue_tokens(user),
            'user': UserSerializer(user).data,
        }, status=status.HTTP_201_CREATED)


class LoginView(APIView):
    """
    API endpoint for user login with JWT token generation.

    Security features:
    - Scoped rate limiting per client
    - Generic error message to prevent user enumeration
    - Failed login attempt logging for security monitoring
    - Case-insensitive email lookup

    POST /api/auth/login/
    Request body: {"email": "user@example.com", "password": "password123"}

    Success response (200):
    {
        "token": "<jwt_access_token>",
        "refresh": "<jwt_refresh_token>",
        "user": {"id": 1, "email": "...", "name": "...", "role": "tenant", ...}
    }

    Error response (401): {"message": "Invalid credentials"}
    """
    permission_classes = [AllowAny]
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = 'login'

    def post(self, request, *args, **kwargs):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        email = serializer.validated_data['email'].lower().strip()
        password = serializer.validated_data['password']
        client_ip = get_client_ip(request)

        invalid = Response(
            {'message': 'Invalid credentials'},
            status=status.HTTP_401_UNAUTHORIZED
        )

        try:
            user = User.objects.get(email__iexact=email)
        except User.DoesNotExist:
            logger.warning(
                f"Failed login attempt for non-existent user. "
                f"Email: {email}, IP: {client_ip}"
            )
            return invalid

        if not user.check_password(password):
            logger.warning(
                f"Failed login attempt with incorrect password. "
                f"Email: {email}, IP: {client_ip}"
            )
            return invalid

        if not user.is_active:
            logger.warning(
                f"Failed login attempt for inactive account. "
                f"Email: {email}, IP: {client_ip}"
            )
            return invalid

        logger.info(f"Successful login. Email: {email}, IP: {client_ip}")

        return Response({
            **issue_tokens(user),
            'user': UserSerializer(user).data,
        }, status=status.HTTP_200_OK)


class UserProfileView(APIView):
    """
    API endpoint for retrieving and updating the authenticated user's profile.

    GET /api/auth/profile/
    PUT/PATCH /api/auth/profile/  body: {"name": "...", "profileImage": "https://..."}

    Success response (200):
    {
        "id": 1,
        "email": "user@example.com",
        "name": "Jane Doe",
        "role": "tenant",
        "profileImage": "",
        "createdAt": "...",
        "updatedAt": "..."
    }

    Error responses:
    - 401: Missing, invalid, or expired JWT token
    - 400: Invalid data
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, *args, **kwargs):
        return Response(UserSerializer(request.user).data, status=status.HTTP_200_OK)

    def put(self, request, *args, **kwargs):
        return self._update_profile(request)

    def patch(self, request, *args, **kwargs):
        return self._update_profile(request)

    def _update_profile(self, request):
        serializer = UserProfileUpdateSerializer(
            request.user,
            data=request.data,
            partial=True
        )
        serializer.is_valid(raise_exception=True)
        user = serializer.save()

        logger.info(
            f"Profile updated. User ID: {user.id}, Email: {user.email}, "
            f"Fields: {sorted(serializer.validated_data)}"
        )
        return Response(UserSerializer(user).data, status=status.HTTP_200_OK)


# ============================================================================
# Properties
# ============================================================================

class PropertyListCreateView(APIView):
    """
    Browse listings or create a new one.

    GET /api/properties/  (public)
    Query parameters: location, listingType, minPrice, maxPrice,
    priceFrequency, bedrooms, bathrooms, propertyType, furnished, status,
    amenities (comma separated or repeated; every amenity must match)

    POST /api/properties/  (landlord, multipart/form-data)
    Fields: title, description, listingType, price (JSON), location (JSON),
    features (JSON), amenities (JSON list or comma separated), images
    (1-10 files)

    Error responses:
    - 400: Invalid filter parameter or listing data
    - 401: Missing or invalid token (POST)
    - 403: Non-landlord attempting to create a listing
    """

    def get_permissions(self):
        if self.request.method == 'POST':
            return [IsLandlord()]
        return [AllowAny()]

    def get(self, request, *args, **kwargs):
        filters = PropertyFilterSerializer(data=request.query_params, partial=True)
        filters.is_valid(raise_exception=True)

        properties = services.filter_properties(filters.validated_data)
        serializer = PropertySerializer(properties, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)

    def post(self, request, *args, **kwargs):
        serializer = PropertySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        prop = services.create_property(request.user, serializer.validated_data)

        logger.info(
            f"Listing created via API. Property ID: {prop.id}, "
            f"IP: {get_client_ip(request)}"
        )
        return Response(PropertySerializer(prop).data, status=status.HTTP_201_CREATED)


class PropertyDetailView(APIView):
    """
    Retrieve, update or delete a single listing.

    GET /api/properties/<id>/  (public)
    PUT/PATCH /api/properties/<id>/  (owning landlord; partial update,
        new images replace the stored ones)
    DELETE /api/properties/<id>/  (owning landlord)

    Error responses:
    - 404: "Property not found"
    - 403: "Not authorized to update this property" /
           "Not authorized to delete this property"
    """

    def get_permissions(self):
        if self.request.method == 'GET':
            return [AllowAny()]
        return [IsLandlord()]

    def get(self, request, pk, *args, **kwargs):
        prop = services.get_property_or_404(pk)
        return Response(PropertySerializer(prop).data, status=status.HTTP_200_OK)

    def put(self, request, pk, *args, **kwargs):
        return self._update(request, pk)

    def patch(self, request, pk, *args, **kwargs):
        return self._update(request, pk)

    def _update(self, request, pk):
        prop = services.get_property_or_404(pk)
        services.ensure_owner(prop, request.user, 'update')

        serializer = PropertySerializer(prop, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        prop = services.update_property(pk, request.user, serializer.validated_data)
        return Response(PropertySerializer(prop).data, status=status.HTTP_200_OK)

    def delete(self, request, pk, *args, **kwargs):
        services.delete_property(pk, request.user)
        return Response(
            {'message': 'Property deleted successfully'},
            status=status.HTTP_200_OK
        )


class PropertySaveView(APIView):
    """
    Add a listing to, or remove it from, the tenant's saved list.

    POST /api/properties/<id>/save/    -> {"message": "Property saved successfully"}
    DELETE /api/properties/<id>/save/  -> {"message": "Property removed from saved list"}

    Error responses:
    - 404: "Property not found"
    - 400: "Property already saved" / "Property not saved"
    """
    permission_classes = [IsTenant]

    def post(self, request, pk, *args, **kwargs):
        services.save_property(pk, request.user)
        return Response(
            {'message': 'Property saved successfully'},
            status=status.HTTP_200_OK
        )

    def delete(self, request, pk, *args, **kwargs):
        services.unsave_property(pk, request.user)
        return Response(
            {'message': 'Property removed from saved list'},
            status=status.HTTP_200_OK
        )


class PropertySavedStatusView(APIView):
    """GET /api/properties/<id>/saved/ -> {"isSaved": true|false}"""
    permission_classes = [IsTenant]

    def get(self, request, pk, *args, **kwargs):
        serializer = SavedStatusSerializer({
            'isSaved': services.is_property_saved(pk, request.user)
        })
        return Response(serializer.data, status=status.HTTP_200_OK)


# ============================================================================
# Applications
# ============================================================================

class ApplicationCreateView(APIView):
    """
    Tenant applies to rent a listing.

    POST /api/applications/
    Request body: {"propertyId": 1}

    Error responses:
    - 404: "Property not found"
    - 400: "Property is not available for rent" /
           "You have already applied for this property"
    - 403: Non-tenant
    """
    permission_classes = [IsTenant]

    def post(self, request, *args, **kwargs):
        serializer = ApplicationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        application = services.submit_application(
            serializer.validated_data['propertyId'],
            request.user
        )
        return Response(
            ApplicationSerializer(application).data,
            status=status.HTTP_201_CREATED
        )


class TenantApplicationListView(ListAPIView):
    """GET /api/applications/tenant/ - the tenant's applications, newest first."""
    permission_classes = [IsTenant]
    serializer_class = ApplicationSerializer
    pagination_class = None

    def get_queryset(self):
        return services.list_tenant_applications(self.request.user)


class LandlordApplicationListView(ListAPIView):
    """GET /api/applications/landlord/ - applications to the landlord's listings."""
    permission_classes = [IsLandlord]
    serializer_class = ApplicationSerializer
    pagination_class = None

    def get_queryset(self):
        return services.list_landlord_applications(self.request.user)


class ApplicationStatusUpdateView(APIView):
    """
    Landlord approves or rejects an application.

    PUT /api/applications/<id>/status/
    Request body: {"status": "approved"}

    Approving rents the property and rejects every other pending
    application for it.

    Error responses:
    - 404: "Application not found"
    - 403: "Not authorized to update this application"
    - 400: Unknown status, decided application, or property no longer
           available
    """
    permission_classes = [IsLandlord]

    def put(self, request, pk, *args, **kwargs):
        serializer = ApplicationStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        application = services.update_application_status(
            pk,
            serializer.validated_data['status'],
            request.user
        )

        logger.info(
            f"Application {pk} set to {application.status} by "
            f"{request.user.email}, IP: {get_client_ip(request)}"
        )
        return Response(ApplicationSerializer(application).data, status=status.HTTP_200_OK)


# ============================================================================
# Maintenance
# ============================================================================

class MaintenanceRequestCreateView(APIView):
    """
    Tenant files a maintenance request.

    POST /api/maintenance/
    Request body: {
        "propertyId": 1,
        "title": "Leaking tap",
        "description": "Kitchen tap drips constantly",
        "priority": "medium"
    }

    Error responses:
    - 404: "Property not found"
    - 400: Blank title/description or unknown priority
    """
    permission_classes = [IsTenant]

    def post(self, request, *args, **kwargs):
        serializer = MaintenanceRequestCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        maintenance_request = services.create_maintenance_request(
            request.user,
            data['propertyId'],
            data['title'],
            data['description'],
            data['priority'],
        )
        return Response(
            MaintenanceRequestSerializer(maintenance_request).data,
            status=status.HTTP_201_CREATED
        )


class TenantMaintenanceListView(ListAPIView):
    permission_classes = [IsTenant]
    serializer_class = MaintenanceRequestSerializer
    pagination_class = None

    def get_queryset(self):
        return services.list_tenant_maintenance_requests(self.request.user)


class LandlordMaintenanceListView(ListAPIView):
    permission_classes = [IsLandlord]
    serializer_class = MaintenanceRequestSerializer
    pagination_class = None

    def get_queryset(self):
        return services.list_landlord_maintenance_requests(self.request.user)


class MaintenanceStatusUpdateView(APIView):
    """
    PUT /api/maintenance/<id>/status/  body: {"status": "in_progress"}

    Status only moves forward; completed requests cannot change.
    """
    permission_classes = [IsLandlord]

    def put(self, request, pk, *args, **kwargs):
        serializer = MaintenanceStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        maintenance_request = services.update_maintenance_status(
            pk,
            serializer.validated_data['status'],
            request.user
        )
        return Response(
            MaintenanceRequestSerializer(maintenance_request).data,
            status=status.HTTP_200_OK
        )


# ============================================================================
# Dashboards
# ============================================================================

class TenantStatsView(APIView):
    permission_classes = [IsTenant]

    def get(self, request, *args, **kwargs):
        return Response(dashboard.tenant_stats(request.user))


class TenantSavedPropertiesView(ListAPIView):
    permission_classes = [IsTenant]
    serializer_class = PropertySerializer
    pagination_class = None

    def get_queryset(self):
        return dashboard.tenant_saved_properties(self.request.user)


class TenantDashboardApplicationsView(TenantApplicationListView):
    pass


class TenantNotificationsView(ListAPIView):
    permission_classes = [IsTenant]
    serializer_class = NotificationSerializer
    pagination_class = None

    def get_queryset(self):
        return dashboard.tenant_notifications(self.request.user)


class LandlordStatsView(APIView):
    permission_classes = [IsLandlord]

    def get(self, request, *args, **kwargs):
        return Response(dashboard.landlord_stats(request.user))


class LandlordPropertiesView(ListAPIView):
    permission_classes = [IsLandlord]
    serializer_class = PropertySerializer
    pagination_class = None

    def get_queryset(self):
        return dashboard.landlord_properties(self.request.user)


class LandlordDashboardApplicationsView(LandlordApplicationListView):
    pass


class LandlordIncomeView(APIView):
    """
    GET /api/dashboard/landlord/income/

    Success response (200):
    {
        "monthly": [{"month": "2025-03", "amount": 2400.0, "transactions": 2}, ...],
        "transactions": [<10 most recent transactions>]
    }
    """
    permission_classes = [IsLandlord]

    def get(self, request, *args, **kwargs):
        recent = dashboard.landlord_recent_transactions(request.user)
        return Response({
            'monthly': dashboard.landlord_monthly_income(request.user),
            'transactions': TransactionSerializer(recent, many=True).data,
        })


class AdminStatsView(APIView):
    permission_classes = [IsAdminRole]

    def get(self, request, *args, **kwargs):
        return Response(dashboard.admin_stats())


class AdminUsersView(ListAPIView):
    permission_classes = [IsAdminRole]
    serializer_class = UserSerializer
    pagination_class = None

    def get_queryset(self):
        return dashboard.admin_users()


class AdminPropertiesView(ListAPIView):
    permission_classes = [IsAdminRole]
    serializer_class = PropertySerializer
    pagination_class = None

    def get_queryset(self):
        return dashboard.admin_properties()


class AdminTransactionsView(ListAPIView):
    permission_classes = [IsAdminRole]
    serializer_class = TransactionSerializer
    pagination_class = None

    def get_queryset(self):
        return dashboard.admin_transactions()
