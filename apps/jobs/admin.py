from django.contrib import admin
from .models import Job, JobApplication, Review

@admin.register(Job)
class JobAdmin(admin.ModelAdmin):
    list_display = ('title', 'client', 'category', 'city', 'budget_amount', 'status', 'assigned_worker', 'created_at')
    list_filter = ('status', 'category', 'urgency')
    search_fields = ('title', 'client__username', 'city')

@admin.register(JobApplication)
class JobApplicationAdmin(admin.ModelAdmin):
    list_display = ('job', 'worker', 'status', 'payment_processing', 'review_rating', 'applied_at')
    list_filter = ('status', 'payment_method')
    search_fields = ('job__title', 'worker__user__username')

@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ('job', 'reviewer', 'reviewee', 'rating', 'is_visible', 'created_at')
    list_filter = ('rating', 'is_visible')
    search_fields = ('job__title', 'reviewer__username', 'reviewee__username')
