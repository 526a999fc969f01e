from django.urls import path

from . import views

app_name = "backoffice"

urlpatterns = [
    path("", views.dashboard_view, name="dashboard"),
    path("dashboard.json", views.dashboard_data_view, name="dashboard_data"),
    path("requests/", views.request_list_view, name="requests"),
    path("requests/<int:pk>/", views.request_detail_view, name="request_detail"),
    path("requests/<int:pk>/approve/", views.request_approve_view, name="request_approve"),
    path("requests/<int:pk>/reject/", views.request_reject_view, name="request_reject"),
    path("requests/<int:pk>/cash-receipt/", views.request_cash_receipt_view, name="request_cash_receipt"),
    path("sponsorships/", views.sponsorship_list_view, name="sponsorships"),
    path("sponsorships/new/", views.sponsorship_create_view, name="sponsorship_create"),
    path("sponsorships/<int:pk>/status/", views.sponsorship_status_view, name="sponsorship_status"),
    path("sponsorships/<int:pk>/receipts/", views.sponsorship_add_receipt_view, name="sponsorship_add_receipt"),
    path("deposits/", views.deposit_list_view, name="deposits"),
    path("deposits/<int:pk>/status/", views.deposit_status_view, name="deposit_status"),
    path("notifications/", views.notification_list_view, name="notifications"),
    path("users/", views.user_list_view, name="users"),
    path("users/invite/", views.user_invite_view, name="user_invite"),
    path("users/<int:pk>/role/", views.user_role_view, name="user_role"),
    path("export/<slug:kind>/", views.export_view, name="export"),
]
