from django.urls import path
from .views import (
    VenueInvitationListCreateView,
    VenueManagerInvitationListCreateView,
    VenueNetworkView,
    VenueIsManagerView,
    MyNetworkView,
    MusicianSearchView,
    MyVenueNetworksView,
    InvitationLookupView,
    InvitationAcceptView,
    ManagerInvitationLookupView,
    ManagerInvitationAcceptView,
)

urlpatterns = [
    # Venue-scoped
    path(
        "venues/<int:venue_id>/invitations/",
        VenueInvitationListCreateView.as_view(),
        name="venue-invitations",
    ),
    path(
        "venues/<int:venue_id>/manager-invitations/",
        VenueManagerInvitationListCreateView.as_view(),
        name="venue-manager-invitations",
    ),
    path("venues/<int:venue_id>/network/", VenueNetworkView.as_view(), name="venue-network"),
    path("venues/<int:venue_id>/is-manager/", VenueIsManagerView.as_view(), name="venue-is-manager"),

    # Musician-scoped
    path("network/", MyNetworkView.as_view(), name="my-network"),
    path("network/search/", MusicianSearchView.as_view(), name="musician-search"),
    path("network/venues/", MyVenueNetworksView.as_view(), name="my-venue-networks"),

    # Code-scoped
    path("invitations/<str:code>/", InvitationLookupView.as_view(), name="invitation-lookup"),
    path("invitations/<str:code>/accept/", InvitationAcceptView.as_view(), name="invitation-accept"),
    path(
        "manager-invitations/<str:code>/",
        ManagerInvitationLookupView.as_view(),
        name="manager-invitation-lookup",
    ),
    path(
        "manager-invitations/<str:code>/accept/",
        ManagerInvitationAcceptView.as_view(),
        name="manager-invitation-accept",
    ),
]
