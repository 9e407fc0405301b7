"""Pastor Digital URL configuration with namespaced routing."""
from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularSwaggerView,
    SpectacularRedocView,
)

from apps.members.urls import api_urlpatterns as members_api
from apps.discipleship.urls import api_urlpatterns as discipleship_api
from apps.care.urls import api_urlpatterns as care_api
from apps.communication.urls import api_urlpatterns as communication_api


api_v1_patterns = [
    path('members/', include((members_api, 'members'))),
    path('discipleship/', include((discipleship_api, 'discipleship'))),
    path('communication/', include((communication_api, 'communication'))),
    path('care/', include((care_api, 'care'))),
]


urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include((api_v1_patterns, 'api'), namespace='v1')),
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),
    path('accounts/', include('allauth.urls')),
]

if settings.DEBUG:
    urlpatterns += static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)
