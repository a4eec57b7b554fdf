from django.urls import include, path

from core import views as core_views

api_patterns = [
    path('', include('core.urls')),
    path('', include('payments.urls')),
]

urlpatterns = [
    path('health', core_views.health, name='health'),
    path('api/', include(api_patterns)),
    # Some proxies strip the /api prefix before forwarding, so the same
    # routes are served from the root as well.
    path('', include(api_patterns)),
]

handler404 = 'core.views.not_found'
handler500 = 'core.views.server_error'
