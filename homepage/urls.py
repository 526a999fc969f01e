from django.urls import path

from . import views

app_name = "homepage"

urlpatterns = [
    path("", views.home_view, name="homepage"),
    path("about/", views.about_view, name="about"),
]
