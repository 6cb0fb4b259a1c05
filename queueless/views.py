from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.views.decorators.http import require_GET

from accounts.models import Role
from admin_panel.views import owner_dashboard
from queue_system import ledger


def customer_dashboard(request):
    token = ledger.list_active_for_user(request.user)
    return JsonResponse({
        'view': Role.CUSTOMER,
        'session': request.user.as_session(),
        'active_token': token.as_dict() if token else None,
        'eta': ledger.queue_eta(token) if token else None,
    })


DASHBOARDS = {
    Role.CUSTOMER: customer_dashboard,
    Role.ADMIN: owner_dashboard,
}


@login_required
@require_GET
def home(request):
    # Every Role member must have an entry; a KeyError here is a bug
    return DASHBOARDS[Role(request.user.role)](request)
