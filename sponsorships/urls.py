from django.urls import path

from . import views

app_name = "sponsorships"

urlpatterns = [
    path("thanks/", views.thanks_view, name="thanks"),
    path("receipt/<str:number>/", views.receipt_view, name="receipt"),
    path("receipt-lookup/", views.receipt_lookup_view, name="lookup"),
    path("my-receipts/", views.my_receipts_view, name="my_receipts"),
    path("my-requests/", views.my_requests_view, name="my_requests"),
]
