from django.contrib import admin
from .models import User, Client, Worker

@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'email', 'phone_number', 'is_client', 'is_worker', 'is_staff', 'date_joined')
    list_filter = ('is_staff', 'is_active')
    search_fields = ('username', 'email', 'phone_number')

@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ('user', 'location', 'posted_jobs')
    search_fields = ('user__username', 'location')

    def posted_jobs(self, obj):
        return obj.user.jobs.count()

@admin.register(Worker)
class WorkerAdmin(admin.ModelAdmin):
    list_display = ('user', 'location', 'skills', 'has_experience', 'last_activity')
    list_filter = ('has_experience',)
    search_fields = ('user__username', 'skills', 'location')
