from django.urls import path
from .views import (
    JobCreateView, JobListView, OpenJobListView, JobDetailView, JobApplicationView,
    JobApplicationsListView, WorkerApplicationsView, ApplicationDetailView,
    ApplicationRejectView, ApplicationWithdrawView, ApplicationProgressView, PaymentRetryView
)

urlpatterns = [
    path('jobs/create/', JobCreateView.as_view(), name='job_create'),
    path('jobs/', JobListView.as_view(), name='job_list'),
    path('jobs/open/', OpenJobListView.as_view(), name='open_jobs'),
    path('jobs/<int:pk>/details/', JobDetailView.as_view(), name='job_details'),
    path('jobs/<int:id>/apply/', JobApplicationView.as_view(), name='job_apply'),
    path('jobs/<int:id>/applications/', JobApplicationsListView.as_view(), name='job_applications'),
    path('applications/mine/', WorkerApplicationsView.as_view(), name='worker_applications'),
    path('applications/<int:pk>/', ApplicationDetailView.as_view(), name='application_detail'),
    path('applications/<int:pk>/reject/', ApplicationRejectView.as_view(), name='application_reject'),
    path('applications/<int:pk>/withdraw/', ApplicationWithdrawView.as_view(), name='application_withdraw'),
    path('applications/<int:pk>/progress/', ApplicationProgressView.as_view(), name='application_progress'),
    path('applications/<int:pk>/payment/retry/', PaymentRetryView.as_view(), name='application_payment_retry'),
]
