from django.urls import path

from . import views

app_name = "deposits"

urlpatterns = [
    path("request/", views.deposit_request_view, name="request"),
]
