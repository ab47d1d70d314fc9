"""
URL Configuration do ledger de contas.

Estrutura:
- /admin/ - Django Admin
- /ledger/api/ - API JSON de contas e transações
- /health/ - Health check (banco de dados)
"""

from django.contrib import admin
from django.urls import path, include

from src.adapters.django_app.ledger.api_views import health_view

urlpatterns = [
    # Django Admin
    path('admin/', admin.site.urls),

    # Ledger App
    path('ledger/', include('src.adapters.django_app.ledger.urls')),

    # Health check
    path('health/', health_view, name='health'),
]
