from django.contrib import admin
from .models import (
    Venue, VenueManager, NetworkMembership, MusicianConnection, VenueInvitation, VenueManagerInvitation,
)

@admin.register(Venue)
class VenueAdmin(admin.ModelAdmin):
    list_display = ('name', 'address', 'created_by', 'created_at')
    search_fields = ('name', 'address')

@admin.register(VenueManager)
class VenueManagerAdmin(admin.ModelAdmin):
    list_display = ('venue', 'user', 'created_at')
    search_fields = ('venue__name', 'user__username', 'user__email')

@admin.register(NetworkMembership)
class NetworkMembershipAdmin(admin.ModelAdmin):
    list_display = ('venue', 'musician', 'added_by', 'created_at')
    list_filter = ('venue',)
    search_fields = ('venue__name', 'musician__username', 'musician__email')

@admin.register(MusicianConnection)
class MusicianConnectionAdmin(admin.ModelAdmin):
    list_display = ('owner', 'member', 'created_at')
    search_fields = ('owner__username', 'member__username', 'member__email')

@admin.register(VenueInvitation)
class VenueInvitationAdmin(admin.ModelAdmin):
    list_display = ('invitation_code', 'venue', 'status', 'musician_email', 'expires_at', 'accepted_by')
    list_filter = ('status', 'venue')
    search_fields = ('invitation_code', 'musician_email', 'venue__name')

@admin.register(VenueManagerInvitation)
class VenueManagerInvitationAdmin(admin.ModelAdmin):
    list_display = ('invitation_code', 'venue', 'email', 'status', 'expires_at', 'accepted_by')
    list_filter = ('status', 'venue')
    search_fields = ('invitation_code', 'email', 'venue__name')
