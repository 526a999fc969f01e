from django.core.paginator import Paginator
from django.shortcuts import get_object_or_404, render
from django.views.decorators.http import require_GET

from .forms import OrphanFilterForm
from .models import Orphan


def list_orphans(search: str | None = None, status: str | None = None):
    qs = Orphan.objects.public().search(search)
    if status:
        qs = qs.filter(status=Orphan.normalize_status(status))
    return qs


def get_orphan(pk):
    return get_object_or_404(Orphan.objects.public(), pk=pk)


@require_GET
def orphan_list_view(request):
    form = OrphanFilterForm(request.GET or None)
    search = status = None
    if form.is_valid():
        search = form.cleaned_data.get("q")
        status = form.cleaned_data.get("status")
    page = Paginator(list_orphans(search, status), 12).get_page(request.GET.get("page"))
    return render(request, "orphans/list.html", {"form": form, "page": page, "orphans": page.object_list})


def orphan_detail_view(request, pk):
    # The sponsorship request form posts back here
    from sponsorships.views import sponsorship_request_view

    return sponsorship_request_view(request, get_orphan(pk))
