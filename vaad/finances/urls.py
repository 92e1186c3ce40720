"""
finances/urls.py
────────────────
URL patterns for the budget and payment pages.
Include in the root urls.py with:
    path('budget/', include('finances.urls')),
"""

from django.urls import path

from . import views

urlpatterns = [
    # Budget plan, allocations, expenses
    path('',                                   views.budget_view,            name='budget'),
    path('settings/',                          views.budget_settings_view,   name='budget_settings'),
    path('allocations/',                       views.event_allocations_view, name='event_allocations'),
    path('events/new/',                        views.add_custom_event_view,  name='add_custom_event'),
    path('expenses/new/',                      views.log_expense_view,       name='log_expense'),
    path('expenses/<int:expense_id>/delete/',  views.delete_expense_view,    name='delete_expense'),

    # Payment collection
    path('payments/',                              views.payments_view,              name='payments'),
    path('payments/rounds/new/',                   views.create_payment_round_view,  name='create_payment_round'),
    path('payments/rounds/<int:round_id>/delete/', views.delete_payment_round_view,  name='delete_payment_round'),
    path('payments/<int:payment_id>/status/',      views.update_payment_status_view, name='update_payment_status'),
    path('payments/bulk/',                         views.bulk_update_payments_view,  name='bulk_update_payments'),
]
