import os
import sys
import django

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'queueless.settings')
django.setup()

from accounts.models import User, Role
from businesses.models import Business, Service

# Sample businesses and their services
businesses_data = [
    {
        'name': 'City Health Center', 'category': 'Healthcare', 'location': '123 Medical Dr, Downtown',
        'image_url': 'https://picsum.photos/seed/hosp/800/400',
        'services': [
            {'name': 'General Consultation', 'description': 'Routine checkups and non-emergencies', 'average_service_time': 15},
            {'name': 'Vaccination', 'description': 'Flu, COVID, and other immunizations', 'average_service_time': 10},
            {'name': 'Pharmacy Pickup', 'description': 'Collect prescribed medications', 'average_service_time': 5},
        ],
    },
    {
        'name': 'Metropolis Bank', 'category': 'Finance', 'location': '456 Wealth Ave, Financial District',
        'image_url': 'https://picsum.photos/seed/bank/800/400',
        'services': [
            {'name': 'Teller Services', 'description': 'Deposits, withdrawals, and cash services', 'average_service_time': 8},
            {'name': 'Account Opening', 'description': 'Open new savings or checking accounts', 'average_service_time': 30},
            {'name': 'Loan Consultation', 'description': 'Mortgages, personal, and business loans', 'average_service_time': 45},
        ],
    },
    {
        'name': 'Gourmet Central', 'category': 'Dining', 'location': '789 Flavor St, Midtown',
        'image_url': 'https://picsum.photos/seed/food/800/400',
        'services': [
            {'name': 'Dine-In Waiting List', 'description': 'Get a table for your group', 'average_service_time': 40},
            {'name': 'Takeaway Collection', 'description': 'Pick up your pre-ordered meal', 'average_service_time': 5},
        ],
    },
]

# Optional: python populate_data.py owner@example.com
owner = None
if len(sys.argv) > 1:
    owner = User.objects.get(email=sys.argv[1])
    owner.role = Role.ADMIN
    owner.save(update_fields=['role'])

for data in businesses_data:
    services = data.pop('services')
    business, _ = Business.objects.get_or_create(name=data['name'], defaults=data)
    if owner and business.owner_id is None:
        business.owner = owner
        business.save(update_fields=['owner'])
        owner = None  # one listing per owner
    for service in services:
        Service.objects.get_or_create(business=business, name=service['name'], defaults=service)

print("Sample businesses created successfully!")
