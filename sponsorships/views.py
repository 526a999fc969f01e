import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.http import Http404
from django.shortcuts import redirect, render
from django.views.decorators.cache import never_cache
from django.views.decorators.http import require_GET, require_http_methods

from deposits.services import active_bank_accounts

from .exceptions import WorkflowError
from .forms import ReceiptLookupForm, SponsorshipRequestForm
from .models import Receipt, Sponsorship, SponsorshipRequest
from .services import lookup_receipt, receipts_for_user, submit_request, user_can_view_sponsorship

logger = logging.getLogger(__name__)

LAST_REQUEST_SESSION_KEY = "last_sponsorship_request"


def _initial_from_profile(user) -> dict:
    profile = getattr(user, "profile", None) if user.is_authenticated else None
    if profile is None:
        return {}
    return {
        "sponsor_full_name": profile.full_name,
        "sponsor_phone": profile.phone,
        "sponsor_email": profile.email or user.email,
        "sponsor_country": profile.country,
    }


@require_http_methods(["GET", "POST"])
def sponsorship_request_view(request, orphan):
    """Orphan detail page with the sponsorship request form."""
    if request.method == "POST":
        form = SponsorshipRequestForm(request.POST, request.FILES)
        if form.is_valid():
            try:
                req = submit_request(
                    orphan,
                    form.cleaned_data,
                    user=request.user,
                    transfer_receipt=form.cleaned_data.get("transfer_receipt"),
                )
            except WorkflowError as exc:
                form.add_error(None, str(exc))
            else:
                request.session[LAST_REQUEST_SESSION_KEY] = req.pk
                return redirect("sponsorships:thanks")
    else:
        form = SponsorshipRequestForm(initial=_initial_from_profile(request.user))

    context = {
        "orphan": orphan,
        "form": form,
        "monthly_amount": orphan.monthly_amount,
        "yearly_amount": orphan.monthly_amount * 12,
        "bank_accounts": active_bank_accounts(),
    }
    return render(request, "orphans/detail.html", context)


@require_GET
def thanks_view(request):
    req = None
    pk = request.session.get(LAST_REQUEST_SESSION_KEY)
    if pk:
        req = SponsorshipRequest.objects.select_related("orphan").filter(pk=pk).first()
    return render(request, "sponsorships/thanks.html", {"req": req})


@login_required
@require_GET
def receipt_view(request, number):
    sponsorship = (
        Sponsorship.objects.select_related("orphan", "sponsor", "request")
        .filter(receipt_number=number)
        .first()
    )
    receipt = None
    if sponsorship is None:
        receipt = Receipt.objects.select_related("sponsorship__orphan", "sponsorship__sponsor").filter(receipt_number=number).first()
        if receipt is None:
            raise Http404("Receipt not found")
        sponsorship = receipt.sponsorship
    else:
        receipt = sponsorship.receipts.filter(receipt_number=number).first()

    if not user_can_view_sponsorship(request.user, sponsorship):
        # Do not reveal that the number exists
        raise Http404("Receipt not found")

    context = {
        "sponsorship": sponsorship,
        "receipt": receipt,
        "req": sponsorship.request,
        "amount": receipt.amount if receipt else sponsorship.total_amount,
    }
    return render(request, "sponsorships/receipt.html", context)


@never_cache
@require_http_methods(["GET", "POST"])
def receipt_lookup_view(request):
    result = None
    searched = False
    if request.method == "POST":
        form = ReceiptLookupForm(request.POST)
        if form.is_valid():
            searched = True
            result = lookup_receipt(form.cleaned_data["name"], form.cleaned_data["phone"])
            if result is None:
                messages.info(request, "No approved sponsorship matches these details.")
    else:
        form = ReceiptLookupForm()
    return render(request, "sponsorships/lookup.html", {"form": form, "result": result, "searched": searched})


@login_required
@require_GET
def my_receipts_view(request):
    return render(request, "sponsorships/my_receipts.html", {"receipts": receipts_for_user(request.user)})


@login_required
@require_GET
def my_requests_view(request):
    requests_qs = (
        SponsorshipRequest.objects.filter(user=request.user)
        .select_related("orphan", "sponsorship")
        .order_by("-created_at")
    )
    return render(request, "sponsorships/my_requests.html", {"requests": requests_qs})
