from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.shortcuts import redirect, render

from .forms import DepositReceiptRequestForm
from .services import active_bank_accounts, submit_deposit_request


@login_required
def deposit_request_view(request):
    if request.method == "POST":
        form = DepositReceiptRequestForm(request.POST, request.FILES)
        if form.is_valid():
            submit_deposit_request(request.user, form.cleaned_data, receipt_image=form.cleaned_data.get("receipt_image"))
            messages.success(request, "Your deposit receipt request has been sent. We will contact you soon.")
            return redirect("deposits:request")
    else:
        profile = getattr(request.user, "profile", None)
        initial = {"sponsor_name": profile.full_name, "phone_number": profile.phone} if profile else {}
        form = DepositReceiptRequestForm(initial=initial)
    recent = request.user.deposit_requests.all()[:10]
    return render(request, "deposits/request.html", {"form": form, "bank_accounts": active_bank_accounts(), "recent": recent})
