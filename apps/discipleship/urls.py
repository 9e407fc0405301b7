"""
Discipleship URLs - API routing.

URL Namespaces:
- API: api:v1:discipleship:resource-name
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from . import views_api


api_router = DefaultRouter()
api_router.register(r'plans', views_api.PlanViewSet, basename='plan')
api_router.register(r'stages', views_api.StageViewSet, basename='stage')
api_router.register(r'progress', views_api.ProgressRecordViewSet, basename='progress')
api_router.register(r'dashboard', views_api.DashboardView, basename='dashboard')
api_router.register(r'my-plans', views_api.MyPlansView, basename='my-plans')

api_urlpatterns = [
    path('', include(api_router.urls)),
]
