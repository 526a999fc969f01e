import logging

from django.contrib import messages
from django.contrib.auth import login, logout
from django.contrib.auth.decorators import login_required
from django.contrib.auth.forms import SetPasswordForm
from django.contrib.auth.models import User
from django.contrib.auth.tokens import default_token_generator
from django.shortcuts import redirect, render
from django.utils.encoding import force_str
from django.utils.http import url_has_allowed_host_and_scheme, urlsafe_base64_decode
from django.views.decorators.cache import never_cache
from django.views.decorators.csrf import ensure_csrf_cookie

from .forms import ProfileForm, SignInForm, SignUpForm
from .models import Profile
from .services import create_account

logger = logging.getLogger(__name__)


def _next_url(request, default="homepage:homepage"):
    target = request.POST.get("next") or request.GET.get("next")
    if target and url_has_allowed_host_and_scheme(target, allowed_hosts={request.get_host()}):
        return target
    return default


@ensure_csrf_cookie
@never_cache
def signup_view(request):
    if request.user.is_authenticated:
        return redirect("homepage:homepage")
    if request.method == "POST":
        form = SignUpForm(request.POST)
        if form.is_valid():
            data = form.cleaned_data
            user = create_account(
                full_name=data["full_name"],
                email=data["email"],
                phone=data["phone"],
                password=data["password1"],
            )
            login(request, user, backend="django.contrib.auth.backends.ModelBackend")
            messages.success(request, "Your account has been created.")
            return redirect(_next_url(request))
    else:
        form = SignUpForm()
    return render(request, "accounts/signup.html", {"form": form})


@ensure_csrf_cookie
@never_cache
def signin_view(request):
    if request.method == "POST":
        form = SignInForm(request.POST)
        if form.is_valid():
            login(request, form.get_user(), backend="django.contrib.auth.backends.ModelBackend")
            return redirect(_next_url(request))
        logger.info("Failed sign-in for identifier=%s", request.POST.get("identifier"))
    else:
        form = SignInForm()
    return render(request, "accounts/signin.html", {"form": form, "next": request.GET.get("next", "")})


def logout_view(request):
    logout(request)
    return redirect("homepage:homepage")


@login_required
def profile_view(request):
    from sponsorships.models import Sponsorship

    profile, _ = Profile.objects.get_or_create(
        user=request.user,
        defaults={"full_name": request.user.get_full_name() or request.user.get_username(), "email": request.user.email},
    )
    if request.method == "POST":
        form = ProfileForm(request.POST, instance=profile)
        if form.is_valid():
            form.save()
            messages.success(request, "Profile updated.")
            return redirect("accounts:profile")
    else:
        form = ProfileForm(instance=profile)

    sponsorships = (
        Sponsorship.objects.filter(sponsor__user=request.user)
        .select_related("orphan")
        .order_by("-created_at")
    )
    return render(request, "accounts/profile.html", {"form": form, "sponsorships": sponsorships})


@never_cache
def set_password_view(request, uidb64, token):
    try:
        uid = force_str(urlsafe_base64_decode(uidb64))
        user = User.objects.get(pk=uid)
    except (TypeError, ValueError, OverflowError, User.DoesNotExist):
        user = None

    if user is None or not default_token_generator.check_token(user, token):
        return render(request, "accounts/set_password.html", {"invalid_link": True}, status=400)

    if request.method == "POST":
        form = SetPasswordForm(user, request.POST)
        if form.is_valid():
            form.save()
            login(request, user, backend="django.contrib.auth.backends.ModelBackend")
            messages.success(request, "Your password has been set.")
            return redirect("homepage:homepage")
    else:
        form = SetPasswordForm(user)
    return render(request, "accounts/set_password.html", {"form": form})
