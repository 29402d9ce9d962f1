from django.contrib import admin
from .models import Gig, Slot, Application, GigInvitation

class SlotInline(admin.TabularInline):
    model = Slot
    extra = 0

@admin.register(Gig)
class GigAdmin(admin.ModelAdmin):
    list_display = ('title', 'owner', 'venue', 'status', 'start_time', 'created_at')
    list_filter = ('status', 'venue')
    search_fields = ('title', 'location', 'owner__username')
    inlines = [SlotInline]

@admin.register(Application)
class ApplicationAdmin(admin.ModelAdmin):
    list_display = ('gig', 'slot', 'applicant', 'instrument', 'status', 'submitted_at', 'decided_at')
    list_filter = ('status', 'instrument')
    search_fields = ('gig__title', 'applicant__username')

@admin.register(GigInvitation)
class GigInvitationAdmin(admin.ModelAdmin):
    list_display = ('gig', 'instrument', 'musician', 'invited_by', 'created_at')
    search_fields = ('gig__title', 'musician__username')
