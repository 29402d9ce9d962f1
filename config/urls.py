from django.contrib import admin
from django.urls import path, include
from core.views import HealthCheckView, WhatsAppLinkView

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/gigs/', include('gigs.urls')),
    path('api/', include('venues.urls')),
    path("api/messages/whatsapp-link/", WhatsAppLinkView.as_view(), name="whatsapp-link"),
    path("api/health/", HealthCheckView.as_view(), name="health-check"),
]
