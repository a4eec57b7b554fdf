from django.urls import path

from . import views

urlpatterns = [
    path('', views.health, name='api_root'),
    path('health', views.health, name='api_health'),
    path('status', views.api_status, name='api_status'),
    path('packages', views.packages, name='packages'),
    path('log-redirect', views.log_redirect, name='log_redirect'),
    path('transactions', views.transactions, name='transactions'),
]
