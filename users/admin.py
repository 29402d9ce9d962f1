from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from .models import User, Musician

@admin.register(User)
class CustomUserAdmin(UserAdmin):
    list_display = ('username', 'email', 'role', 'first_name', 'last_name', 'is_staff')
    list_filter = ('role', 'is_staff', 'is_superuser', 'is_active')
    search_fields = ('username', 'email', 'first_name', 'last_name', 'supabase_id')
    fieldsets = UserAdmin.fieldsets + (
        ('Gigboard', {'fields': ('role', 'supabase_id')}),
    )
    add_fieldsets = UserAdmin.add_fieldsets + (
        ('Gigboard', {'fields': ('role',)}),
    )

@admin.register(Musician)
class MusicianAdmin(admin.ModelAdmin):
    list_display = ('name', 'email', 'phone', 'user', 'updated_at')
    search_fields = ('name', 'email', 'user__username')
