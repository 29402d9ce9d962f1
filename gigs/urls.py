from django.urls import path
from .views import (
    GigCreateView,
    GigDetailView,
    GigCancelView,
    GigApplicationsView,
    SubmitApplicationView,
    AcceptApplicationView,
    RejectApplicationView,
    GigInvitationView,
)

urlpatterns = [
    path("", GigCreateView.as_view(), name="gig-create"),
    path("<int:gig_id>/", GigDetailView.as_view(), name="gig-detail"),
    path("<int:gig_id>/cancel/", GigCancelView.as_view(), name="gig-cancel"),
    path("<int:gig_id>/applications/", GigApplicationsView.as_view(), name="gig-applications"),
    path(
        "<int:gig_id>/slots/<int:slot_id>/apply/",
        SubmitApplicationView.as_view(),
        name="gig-slot-apply",
    ),
    path(
        "applications/<int:application_id>/accept/",
        AcceptApplicationView.as_view(),
        name="application-accept",
    ),
    path(
        "applications/<int:application_id>/reject/",
        RejectApplicationView.as_view(),
        name="application-reject",
    ),
    path("<int:gig_id>/invitations/", GigInvitationView.as_view(), name="gig-invitations"),
]
