from functools import wraps

from django.contrib.auth.decorators import login_required
from django.http import JsonResponse


def role_required(role):
    """Restrict a view to signed-in users holding ``role``."""
    def decorator(view):
        @login_required
        @wraps(view)
        def wrapper(request, *args, **kwargs):
            if request.user.role != role:
                return JsonResponse({'error': 'forbidden'}, status=403)
            return view(request, *args, **kwargs)
        return wrapper
    return decorator
