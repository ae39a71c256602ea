"""
Blood Ledger Django adapter URL routing.
"""

from django.urls import path

from bloodledger.adapters.django_api import views


urlpatterns = [
    path("donors/register", views.donors_register_view),
    path("patients/register", views.patients_register_view),
    path("permissions", views.permissions_view),
    path("permissions/grant", views.permissions_grant_view),
    path("permissions/revoke", views.permissions_revoke_view),
    path("donations", views.donations_view),
    path("inventory", views.inventory_view),
    path("requests", views.requests_list_view),
    path("requests/submit", views.requests_submit_view),
    path("requests/respond", views.requests_respond_view),
    path("responses", views.responses_list_view),
    path("hospitals/add", views.hospitals_add_view),
    path("hospitals/locate", views.hospitals_locate_view),
    path("directory", views.directory_view),
]
