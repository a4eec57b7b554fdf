from django.urls import path

from . import views

urlpatterns = [
    path('payment/initiate', views.initiate_payment, name='payment_initiate'),
    path('payment/status/<str:reference>', views.payment_status, name='payment_status'),
    path('webhook', views.webhook, name='webhook'),
]
