import logging

from django.contrib import messages
from django.contrib.auth.models import User
from django.core.paginator import Paginator
from django.db.models import Count, Q
from django.http import Http404, JsonResponse
from django.shortcuts import get_object_or_404, redirect, render
from django.views.decorators.http import require_GET, require_POST

from accounts.decorators import admin_required, staff_required
from accounts.forms import InviteUserForm, RoleChangeForm
from accounts.roles import set_role
from accounts.services import invite_user
from deposits.forms import DepositStatusForm
from deposits.models import DepositReceiptRequest
from deposits.services import update_deposit_status
from notifications.models import NotificationLog
from sponsorships.exceptions import WorkflowError
from sponsorships.forms import (
    AddReceiptForm,
    ApproveRequestForm,
    CashReceiptForm,
    RejectRequestForm,
    SponsorshipStatusForm,
)
from sponsorships.models import Sponsorship, SponsorshipRequest
from sponsorships.services import (
    approve_request,
    attach_cash_receipt,
    create_receipt,
    create_sponsorship,
    reject_request,
    update_sponsorship_status,
)

from .exports import EXPORTS, workbook_response
from .forms import (
    CreateSponsorshipForm,
    DepositFilterForm,
    NotificationFilterForm,
    RequestFilterForm,
    SponsorshipFilterForm,
)
from .stats import dashboard_chart_data, orphan_stats

logger = logging.getLogger(__name__)

PAGE_SIZE = 25


def _page(request, qs):
    return Paginator(qs, PAGE_SIZE).get_page(request.GET.get("page"))


@staff_required
@require_GET
def dashboard_view(request):
    context = {
        "stats": orphan_stats(),
        "charts": dashboard_chart_data(),
        "pending_requests": SponsorshipRequest.objects.filter(admin_status=SponsorshipRequest.STATUS_PENDING).count(),
        "pending_deposits": DepositReceiptRequest.objects.filter(status=DepositReceiptRequest.STATUS_PENDING).count(),
    }
    return render(request, "backoffice/dashboard.html", context)


@staff_required
@require_GET
def dashboard_data_view(request):
    return JsonResponse({"stats": orphan_stats(), "charts": dashboard_chart_data()})


@staff_required
@require_GET
def request_list_view(request):
    form = RequestFilterForm(request.GET or None)
    qs = SponsorshipRequest.objects.select_related("orphan")
    if form.is_valid():
        if form.cleaned_data.get("status"):
            qs = qs.filter(admin_status=form.cleaned_data["status"])
        term = (form.cleaned_data.get("q") or "").strip()
        if term:
            qs = qs.filter(
                Q(sponsor_full_name__icontains=term)
                | Q(sponsor_phone__icontains=term)
                | Q(orphan__full_name__icontains=term)
            )
    counts = dict(SponsorshipRequest.objects.values_list("admin_status").annotate(n=Count("id")))
    return render(request, "backoffice/requests.html", {"form": form, "page": _page(request, qs), "counts": counts})


@staff_required
@require_GET
def request_detail_view(request, pk):
    req = get_object_or_404(SponsorshipRequest.objects.select_related("orphan", "user", "approved_by"), pk=pk)
    context = {
        "req": req,
        "sponsorship": Sponsorship.objects.filter(request=req).first(),
        "approve_form": ApproveRequestForm(),
        "reject_form": RejectRequestForm(),
        "cash_form": CashReceiptForm(initial={
            "cash_receipt_number": req.cash_receipt_number,
            "cash_receipt_date": req.cash_receipt_date,
        }),
    }
    return render(request, "backoffice/request_detail.html", context)


@staff_required
@require_POST
def request_approve_view(request, pk):
    form = ApproveRequestForm(request.POST)
    notes = form.cleaned_data.get("notes", "") if form.is_valid() else ""
    try:
        sponsorship = approve_request(pk, by_user=request.user, notes=notes)
    except SponsorshipRequest.DoesNotExist:
        raise Http404("Request not found")
    except WorkflowError as exc:
        messages.error(request, str(exc))
    else:
        messages.success(request, f"Request approved. Receipt {sponsorship.receipt_number}.")
    return redirect("backoffice:request_detail", pk=pk)


@staff_required
@require_POST
def request_reject_view(request, pk):
    form = RejectRequestForm(request.POST)
    if not form.is_valid():
        messages.error(request, "Please give a reason for the rejection.")
        return redirect("backoffice:request_detail", pk=pk)
    try:
        reject_request(pk, by_user=request.user, notes=form.cleaned_data["notes"])
    except SponsorshipRequest.DoesNotExist:
        raise Http404("Request not found")
    except WorkflowError as exc:
        messages.error(request, str(exc))
    else:
        messages.success(request, "Request rejected.")
    return redirect("backoffice:request_detail", pk=pk)


@staff_required
@require_POST
def request_cash_receipt_view(request, pk):
    form = CashReceiptForm(request.POST, request.FILES)
    if form.is_valid():
        try:
            attach_cash_receipt(
                pk,
                upload=form.cleaned_data.get("cash_receipt"),
                number=form.cleaned_data.get("cash_receipt_number") or "",
                date=form.cleaned_data.get("cash_receipt_date"),
            )
        except SponsorshipRequest.DoesNotExist:
            raise Http404("Request not found")
        messages.success(request, "Cash receipt saved.")
    else:
        for errors in form.errors.values():
            for error in errors:
                messages.error(request, error)
    return redirect("backoffice:request_detail", pk=pk)


@staff_required
@require_GET
def sponsorship_list_view(request):
    form = SponsorshipFilterForm(request.GET or None)
    qs = Sponsorship.objects.select_related("orphan", "sponsor")
    if form.is_valid():
        if form.cleaned_data.get("status"):
            qs = qs.filter(status=form.cleaned_data["status"])
        term = (form.cleaned_data.get("q") or "").strip()
        if term:
            qs = qs.filter(
                Q(sponsor__full_name__icontains=term)
                | Q(orphan__full_name__icontains=term)
                | Q(receipt_number__icontains=term)
            )
    context = {
        "form": form,
        "page": _page(request, qs),
        "status_form": SponsorshipStatusForm(),
        "receipt_form": AddReceiptForm(),
    }
    return render(request, "backoffice/sponsorships.html", context)


@staff_required
def sponsorship_create_view(request):
    if request.method == "POST":
        form = CreateSponsorshipForm(request.POST)
        if form.is_valid():
            data = form.cleaned_data
            try:
                sponsorship = create_sponsorship(
                    {k: data.get(k) for k in ("full_name", "email", "phone", "country")},
                    data["orphan"],
                    data["type"],
                    data["payment_method"],
                    data["monthly_amount"],
                    by_user=request.user,
                )
            except WorkflowError as exc:
                form.add_error(None, str(exc))
            else:
                messages.success(request, f"Sponsorship {sponsorship.receipt_number} created.")
                return redirect("backoffice:sponsorships")
    else:
        form = CreateSponsorshipForm()
    return render(request, "backoffice/sponsorship_form.html", {"form": form})


@staff_required
@require_POST
def sponsorship_status_view(request, pk):
    sponsorship = get_object_or_404(Sponsorship.objects.select_related("orphan"), pk=pk)
    form = SponsorshipStatusForm(request.POST)
    if form.is_valid():
        update_sponsorship_status(sponsorship, form.cleaned_data["status"])
        messages.success(request, f"Sponsorship {sponsorship.receipt_number} is now {sponsorship.get_status_display()}.")
    else:
        messages.error(request, "Invalid status.")
    return redirect("backoffice:sponsorships")


@staff_required
@require_POST
def sponsorship_add_receipt_view(request, pk):
    sponsorship = get_object_or_404(Sponsorship, pk=pk)
    form = AddReceiptForm(request.POST)
    if form.is_valid():
        receipt = create_receipt(
            sponsorship,
            form.cleaned_data["amount"],
            payment_reference=form.cleaned_data.get("payment_reference") or "",
            issue_date=form.cleaned_data.get("issue_date"),
        )
        messages.success(request, f"Receipt {receipt.receipt_number} added.")
    else:
        messages.error(request, "Enter a valid amount.")
    return redirect("backoffice:sponsorships")


@staff_required
@require_GET
def deposit_list_view(request):
    form = DepositFilterForm(request.GET or None)
    qs = DepositReceiptRequest.objects.select_related("user")
    if form.is_valid() and form.cleaned_data.get("status"):
        qs = qs.filter(status=form.cleaned_data["status"])
    return render(request, "backoffice/deposits.html", {"form": form, "page": _page(request, qs), "status_form": DepositStatusForm()})


@staff_required
@require_POST
def deposit_status_view(request, pk):
    form = DepositStatusForm(request.POST)
    if form.is_valid():
        try:
            update_deposit_status(pk, form.cleaned_data["status"], form.cleaned_data.get("notes"))
        except DepositReceiptRequest.DoesNotExist:
            raise Http404("Deposit request not found")
        except WorkflowError as exc:
            messages.error(request, str(exc))
        else:
            messages.success(request, "Deposit request updated.")
    else:
        messages.error(request, "Invalid status.")
    return redirect("backoffice:deposits")


@staff_required
@require_GET
def notification_list_view(request):
    form = NotificationFilterForm(request.GET or None)
    qs = NotificationLog.objects.all()
    if form.is_valid():
        if form.cleaned_data.get("notification_type"):
            qs = qs.filter(notification_type=form.cleaned_data["notification_type"])
        if form.cleaned_data.get("status"):
            qs = qs.filter(status=form.cleaned_data["status"])
    counts = NotificationLog.objects.aggregate(
        total=Count("id"),
        sent=Count("id", filter=Q(status=NotificationLog.STATUS_SENT)),
        failed=Count("id", filter=Q(status=NotificationLog.STATUS_FAILED)),
        pending=Count("id", filter=Q(status=NotificationLog.STATUS_PENDING)),
    )
    return render(request, "backoffice/notifications.html", {"form": form, "page": _page(request, qs), "counts": counts})


@admin_required
@require_GET
def user_list_view(request):
    users = User.objects.select_related("role", "profile").order_by("-date_joined")
    return render(
        request,
        "backoffice/users.html",
        {"page": _page(request, users), "invite_form": InviteUserForm(), "role_form": RoleChangeForm()},
    )


@admin_required
@require_POST
def user_invite_view(request):
    form = InviteUserForm(request.POST)
    if not form.is_valid():
        messages.error(request, "Enter a valid email and role.")
        return redirect("backoffice:users")
    data = form.cleaned_data
    result = invite_user(
        email=data["email"],
        role=data["role"],
        full_name=data.get("full_name") or "",
        invited_by=request.user,
        base_url=request.build_absolute_uri("/"),
    )
    if result.updated_existing:
        messages.success(request, f"{data['email']} already had an account; role set to {data['role']}.")
    elif result.email_sent:
        messages.success(request, f"Invitation sent to {data['email']}.")
    else:
        messages.warning(request, f"Account created for {data['email']} but the invitation email could not be sent.")
    return redirect("backoffice:users")


@admin_required
@require_POST
def user_role_view(request, pk):
    user = get_object_or_404(User, pk=pk)
    form = RoleChangeForm(request.POST)
    if not form.is_valid():
        messages.error(request, "Invalid role.")
    elif user == request.user and form.cleaned_data["role"] != "admin":
        messages.error(request, "You cannot remove your own admin role.")
    else:
        set_role(user, form.cleaned_data["role"])
        messages.success(request, f"Role for {user.email or user.username} set to {form.cleaned_data['role']}.")
    return redirect("backoffice:users")


@staff_required
@require_GET
def export_view(request, kind):
    builder = EXPORTS.get(kind)
    if builder is None:
        raise Http404("Unknown export")
    logger.info("Export %s requested by %s", kind, request.user)
    return workbook_response(builder(), kind)
