# accounts/admin.py
from django.contrib import admin
from accounts.models import AccountProfile


@admin.register(AccountProfile)
class AccountProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "email_confirmed", "created_at")
    list_filter = ("email_confirmed",)
    search_fields = ("user__username", "user__email")
