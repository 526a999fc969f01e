from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path

from . import views

admin.site.site_header = "Kafala administration"
admin.site.site_title = "Kafala"

handler404 = "kafala.views.error_404_view"

urlpatterns = [
    path("admin/", admin.site.urls),
    path("maintenance/", views.maintenance_view, name="maintenance"),
    path("files/<str:token>/", views.private_file, name="private_file"),
    path("accounts/", include("accounts.urls")),
    path("orphans/", include("orphans.urls")),
    path("deposits/", include("deposits.urls")),
    path("backoffice/", include("backoffice.urls")),
    path("", include("sponsorships.urls")),
    path("", include("homepage.urls")),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
