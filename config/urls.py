# config/urls.py

from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static

urlpatterns = [
    # Admin (also serves session login for the API)
    path('admin/', admin.site.urls),

    # Applications
    path('', include('apps.core.urls')),
    path('api/', include('apps.board.urls')),
]

# Media/static in development
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)

    try:
        import debug_toolbar

        urlpatterns = [
                          path('__debug__/', include(debug_toolbar.urls)),
                      ] + urlpatterns
    except ImportError:
        pass

admin.site.site_header = 'NexusFlow Admin'
admin.site.site_title = 'NexusFlow'
admin.site.index_title = 'Administration'
