"""
URL patterns do ledger (API JSON).

- GET  /ledger/api/accounts/?user_id=<id>
- POST /ledger/api/accounts/
- POST /ledger/api/accounts/<account_number>/close/
- POST /ledger/api/transactions/use/
- POST /ledger/api/transactions/cancel/
- GET  /ledger/api/transactions/<transaction_id>/
"""

from django.urls import path

from . import api_views

app_name = 'ledger'

urlpatterns = [
    # Contas
    path('api/accounts/', api_views.AccountAPIListView.as_view(), name='api_accounts'),
    path(
        'api/accounts/<str:account_number>/close/',
        api_views.AccountAPICloseView.as_view(),
        name='api_account_close',
    ),

    # Transações (ações antes do <transaction_id> para não conflitar)
    path('api/transactions/use/', api_views.TransactionAPIUseView.as_view(), name='api_use'),
    path('api/transactions/cancel/', api_views.TransactionAPICancelView.as_view(), name='api_cancel'),
    path(
        'api/transactions/<str:transaction_id>/',
        api_views.TransactionAPIDetailView.as_view(),
        name='api_transaction_detail',
    ),
]
