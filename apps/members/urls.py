"""
Members URLs - API routing.

URL Namespaces:
- API: api:v1:members:resource-name
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from . import views_api


# =============================================================================
# API ROUTER (DRF ViewSets)
# =============================================================================

api_router = DefaultRouter()

api_router.register(
    r'disciples',
    views_api.DiscipleViewSet,
    basename='disciple'
)

api_router.register(
    r'me',
    views_api.LeaderProfileViewSet,
    basename='me'
)

api_urlpatterns = [
    path('', include(api_router.urls)),
]
