"""Care URLs."""
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from . import views_api

api_router = DefaultRouter()
api_router.register(r'meetings', views_api.MeetingViewSet, basename='meeting')
api_router.register(r'prayer-requests', views_api.PrayerRequestViewSet, basename='prayer-request')

api_urlpatterns = [path('', include(api_router.urls))]
