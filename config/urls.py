"""
URL configuration for the Newsroom project.
"""

from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static

from apps.core.urls import auth_urlpatterns
from apps.articles.urls import dashboard_urlpatterns

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/auth/', include((auth_urlpatterns, 'auth'))),
    # Reader submissions and the review queue
    path('api/submissions/', include('apps.submissions.urls')),
    path('api/articles/', include('apps.articles.urls')),
    path('api/events/', include('apps.events.urls')),
    path('api/settings/countdown/', include('apps.countdown.urls')),
    path('api/dashboard/', include((dashboard_urlpatterns, 'dashboard'))),
    # Observability endpoints
    path('', include('apps.core.urls')),
]

# Serve media files in development
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
    urlpatterns += static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)

# Customize admin site
admin.site.site_header = "Newsroom Administration"
admin.site.site_title = "Newsroom Admin Portal"
admin.site.index_title = "Welcome to Newsroom Administration"
