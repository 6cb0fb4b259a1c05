import logging

from django.contrib.auth import login, authenticate, logout
from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.views.decorators.http import require_POST, require_GET

from businesses.models import Business, LikedPlace
from queue_system.models import Token, TokenStatus
from .forms import SignUpForm, SignInForm

logger = logging.getLogger(__name__)


def _form_error_message(form):
    # first error wins; the client shows a single line
    for errors in form.errors.values():
        if errors:
            return errors[0]
    return 'An error occurred during authentication.'


@require_POST
def register(request):
    form = SignUpForm(request.POST)
    if not form.is_valid():
        logger.info('Sign-up rejected: %s', form.errors.as_json())
        return JsonResponse({'error': _form_error_message(form)}, status=400)

    user = form.save()
    login(request, user, backend='django.contrib.auth.backends.ModelBackend')
    logger.info('Account created for %s (%s)', user.email, user.role)
    return JsonResponse({'session': user.as_session()}, status=201)


@require_POST
def user_login(request):
    form = SignInForm(request.POST)
    if not form.is_valid():
        return JsonResponse({'error': _form_error_message(form)}, status=400)

    user = authenticate(
        request,
        username=form.cleaned_data['email'],
        password=form.cleaned_data['password'],
    )
    if user is None:
        return JsonResponse({'error': 'Invalid login credentials'}, status=400)

    login(request, user)
    return JsonResponse({'session': user.as_session()})


@require_POST
def user_logout(request):
    logout(request)
    return JsonResponse({'session': None})


@require_GET
def session(request):
    if not request.user.is_authenticated:
        return JsonResponse({'session': None})
    return JsonResponse({'session': request.user.as_session()})


@login_required
def profile(request):
    """Liked places, visited places and the user's own listings."""
    user = request.user

    liked = (
        Business.objects.filter(
            pk__in=LikedPlace.objects.filter(user=user).values('business_id')
        ).prefetch_related('services')
    )
    visited = (
        Token.objects.filter(user=user, status=TokenStatus.COMPLETED)
        .select_related('business')
        .order_by('-joined_at')
    )
    listings = Business.objects.none()
    if user.is_owner:
        listings = Business.objects.filter(owner=user).prefetch_related('services')

    return JsonResponse({
        'user': user.as_session(),
        'liked_places': [b.as_dict() for b in liked],
        'visited_places': [t.as_dict() for t in visited],
        'my_listings': [b.as_dict() for b in listings],
    })
