from django.urls import path

from . import views

app_name = "orphans"

urlpatterns = [
    path("", views.orphan_list_view, name="list"),
    path("<int:pk>/", views.orphan_detail_view, name="detail"),
]
