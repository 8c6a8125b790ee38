from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi
from .models import Job, JobApplication
from .serializers import (
    JobSerializer, JobApplicationSerializer, ProgressActionSerializer, progress_payload
)
from .utils import send_notification
from . import services
from core.permissions import IsClient, IsWorker
import logging

logger = logging.getLogger(__name__)


progress_response = openapi.Response(
    description='Canonical progress state',
    schema=openapi.Schema(
        type=openapi.TYPE_OBJECT,
        properties={
            'application_id': openapi.Schema(type=openapi.TYPE_INTEGER),
            'status': openapi.Schema(type=openapi.TYPE_STRING),
            'role': openapi.Schema(type=openapi.TYPE_STRING, enum=['client', 'worker']),
            'current_stage': openapi.Schema(type=openapi.TYPE_INTEGER),
            'stage_name': openapi.Schema(type=openapi.TYPE_STRING),
            'available_action': openapi.Schema(type=openapi.TYPE_STRING, nullable=True),
            'review': openapi.Schema(type=openapi.TYPE_STRING),
            'rating': openapi.Schema(type=openapi.TYPE_INTEGER),
            'payment_processing': openapi.Schema(type=openapi.TYPE_BOOLEAN),
            'payment_error': openapi.Schema(type=openapi.TYPE_STRING),
        }
    )
)

transition_error_response = openapi.Response(
    description='Transition not available',
    schema=openapi.Schema(
        type=openapi.TYPE_OBJECT,
        properties={
            'error': openapi.Schema(type=openapi.TYPE_STRING),
            'action': openapi.Schema(type=openapi.TYPE_STRING),
            'stage': openapi.Schema(type=openapi.TYPE_INTEGER),
        }
    )
)


def get_participant_application(request, pk):
    """Return (application, role, error_response) for the requesting participant."""
    try:
        application = JobApplication.objects.select_related('job', 'job__client', 'worker__user').get(pk=pk)
    except JobApplication.DoesNotExist:
        return None, None, Response({"error": "Application not found"}, status=status.HTTP_404_NOT_FOUND)
    role = application.role_of(request.user)
    if role is None:
        return None, None, Response({"error": "Access denied"}, status=status.HTTP_403_FORBIDDEN)
    return application, role, None


def transition_error(result):
    error = result.error
    return Response(
        {"error": error.reason, "action": error.action, "stage": error.stage},
        status=status.HTTP_400_BAD_REQUEST
    )


class JobCreateView(APIView):
    permission_classes = [IsAuthenticated, IsClient]

    @swagger_auto_schema(
        operation_description="Create a new job.",
        request_body=JobSerializer,
        responses={
            201: JobSerializer,
            400: 'Bad Request',
            401: 'Unauthorized',
            403: 'Forbidden'
        }
    )
    def post(self, request):
        serializer = JobSerializer(data=request.data, context={'request': request})
        if serializer.is_valid():
            job = serializer.save(client=request.user)
            logger.info(f"Client {request.user.id} created job {job.id}")
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

class JobListView(APIView):
    permission_classes = [IsAuthenticated, IsClient]

    @swagger_auto_schema(
        operation_description="List the jobs posted by the authenticated client.",
        responses={200: JobSerializer(many=True), 401: 'Unauthorized'}
    )
    def get(self, request):
        queryset = Job.objects.filter(client=request.user)
        serializer = JobSerializer(queryset, many=True)
        return Response(serializer.data)

class OpenJobListView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(
        operation_description="List all open jobs, optionally filtered by category or city.",
        manual_parameters=[
            openapi.Parameter('category', openapi.IN_QUERY, type=openapi.TYPE_STRING),
            openapi.Parameter('city', openapi.IN_QUERY, type=openapi.TYPE_STRING),
        ],
        responses={200: JobSerializer(many=True), 401: 'Unauthorized'}
    )
    def get(self, request):
        jobs = Job.objects.filter(status='open')
        category = request.query_params.get('category')
        city = request.query_params.get('city')
        if category:
            jobs = jobs.filter(category=category)
        if city:
            jobs = jobs.filter(city__iexact=city)
        serializer = JobSerializer(jobs, many=True)
        return Response(serializer.data)

class JobDetailView(APIView):
    permission_classes = []

    @swagger_auto_schema(
        operation_description="Retrieve a job record.",
        responses={200: JobSerializer, 404: 'Not Found'}
    )
    def get(self, request, pk):
        try:
            job = Job.objects.get(pk=pk)
        except Job.DoesNotExist:
            return Response({"error": "Job not found"}, status=status.HTTP_404_NOT_FOUND)
        return Response(JobSerializer(job).data)

class JobApplicationView(APIView):
    permission_classes = [IsAuthenticated, IsWorker]

    @swagger_auto_schema(
        operation_description="Apply to an open job.",
        request_body=openapi.Schema(
            type=openapi.TYPE_OBJECT,
            properties={
                'cover_letter': openapi.Schema(type=openapi.TYPE_STRING),
                'proposed_amount': openapi.Schema(type=openapi.TYPE_STRING, format='decimal'),
                'estimated_duration': openapi.Schema(type=openapi.TYPE_STRING),
            }
        ),
        responses={
            201: JobApplicationSerializer,
            400: 'Bad Request',
            401: 'Unauthorized',
            403: 'Forbidden',
            404: 'Not Found'
        }
    )
    def post(self, request, id):
        try:
            job = Job.objects.get(pk=id)
        except Job.DoesNotExist:
            logger.error(f"Job {id} not found for application")
            return Response({"error": "Job not found"}, status=status.HTTP_404_NOT_FOUND)

        if job.client_id == request.user.id:
            return Response({"error": "You cannot apply to your own job"}, status=status.HTTP_400_BAD_REQUEST)

        serializer = JobApplicationSerializer(
            data=request.data,
            context={'request': request, 'job': job, 'worker': request.user.worker}
        )
        if serializer.is_valid():
            serializer.save()
            logger.info(f"Worker {request.user.worker.id} applied to job {id}")

            email_subject = f"New Application for Job: {job.title}"
            email_message = (
                f"Dear {job.client.first_name},\n\n"
                f"Worker {request.user.first_name} {request.user.last_name} has applied for your job '{job.title}'.\n"
                f"Please review the application on Workie.lk.\n\n"
                f"Best regards,\nWorkie.lk Team"
            )
            sms_message = f"New application for job '{job.title}' from {request.user.first_name}."
            send_notification(job.client, email_subject, email_message, sms_message)

            return Response(serializer.data, status=status.HTTP_201_CREATED)

        logger.error(f"Job application failed for job {id}: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

class JobApplicationsListView(APIView):
    permission_classes = [IsAuthenticated, IsClient]

    @swagger_auto_schema(
        operation_description="List all applications for a job (client must own the job).",
        responses={
            200: JobApplicationSerializer(many=True),
            401: 'Unauthorized',
            403: 'Forbidden',
            404: 'Not Found'
        }
    )
    def get(self, request, id):
        try:
            job = Job.objects.get(pk=id, client=request.user)
        except Job.DoesNotExist:
            return Response({"error": "Job not found or not authorized"}, status=status.HTTP_404_NOT_FOUND)
        applications = job.applications.all()
        serializer = JobApplicationSerializer(applications, many=True)
        return Response(serializer.data)

class WorkerApplicationsView(APIView):
    permission_classes = [IsAuthenticated, IsWorker]

    @swagger_auto_schema(
        operation_description="List all applications submitted by the authenticated worker.",
        responses={200: JobApplicationSerializer(many=True), 401: 'Unauthorized', 403: 'Forbidden'}
    )
    def get(self, request):
        applications = JobApplication.objects.filter(worker=request.user.worker)
        serializer = JobApplicationSerializer(applications, many=True)
        return Response(serializer.data)

class ApplicationDetailView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(
        operation_description="Retrieve an application (job client or applicant only).",
        responses={200: JobApplicationSerializer, 403: 'Forbidden', 404: 'Not Found'}
    )
    def get(self, request, pk):
        application, role, error = get_participant_application(request, pk)
        if error:
            return error
        return Response(JobApplicationSerializer(application).data)

class ApplicationRejectView(APIView):
    permission_classes = [IsAuthenticated, IsClient]

    @swagger_auto_schema(
        operation_description="Reject a pending application.",
        request_body=openapi.Schema(
            type=openapi.TYPE_OBJECT,
            properties={'reason': openapi.Schema(type=openapi.TYPE_STRING)}
        ),
        responses={200: JobApplicationSerializer, 400: 'Bad Request', 403: 'Forbidden', 404: 'Not Found'}
    )
    def post(self, request, pk):
        application, role, error = get_participant_application(request, pk)
        if error:
            return error
        if role != 'client':
            return Response({"error": "Access denied"}, status=status.HTTP_403_FORBIDDEN)
        application, changed = services.reject_application(application)
        if not changed:
            return Response({"error": "Application has already been responded to"}, status=status.HTTP_400_BAD_REQUEST)

        job = application.job
        reason = request.data.get('reason', '')
        reason_line = f"Reason: {reason}\n" if reason else ""
        email_subject = f"Application Rejected for {job.title}"
        email_message = (
            f"Dear {application.worker.user.first_name},\n\n"
            f"Your application for job '{job.title}' has been rejected by the client.\n"
            f"{reason_line}\n"
            f"Best regards,\nWorkie.lk Team"
        )
        sms_message = f"Your application for '{job.title}' was rejected."
        send_notification(application.worker.user, email_subject, email_message, sms_message)

        return Response(JobApplicationSerializer(application).data)

class ApplicationWithdrawView(APIView):
    permission_classes = [IsAuthenticated, IsWorker]

    @swagger_auto_schema(
        operation_description="Withdraw a pending application.",
        responses={200: JobApplicationSerializer, 400: 'Bad Request', 403: 'Forbidden', 404: 'Not Found'}
    )
    def post(self, request, pk):
        application, role, error = get_participant_application(request, pk)
        if error:
            return error
        if role != 'worker':
            return Response({"error": "Access denied"}, status=status.HTTP_403_FORBIDDEN)
        application, changed = services.withdraw_application(application)
        if not changed:
            return Response(
                {"error": "Cannot withdraw application after it has been responded to"},
                status=status.HTTP_400_BAD_REQUEST
            )

        job = application.job
        email_subject = f"Application Withdrawn: {job.title}"
        email_message = (
            f"Dear {job.client.first_name},\n\n"
            f"Worker {request.user.first_name} {request.user.last_name} has withdrawn their application for job: {job.title}.\n\n"
            f"Best regards,\nWorkie.lk Team"
        )
        sms_message = f"Worker {request.user.first_name} has withdrawn their application for job: {job.title}."
        send_notification(job.client, email_subject, email_message, sms_message)

        return Response(JobApplicationSerializer(application).data)

class ApplicationProgressView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(
        operation_description="Current progress stage and the action available to the caller.",
        responses={200: progress_response, 403: 'Forbidden', 404: 'Not Found'}
    )
    def get(self, request, pk):
        application, role, error = get_participant_application(request, pk)
        if error:
            return error
        return Response(progress_payload(application, role))

    @swagger_auto_schema(
        operation_description=(
            "Request a progress transition. The caller's role is taken from the application; "
            "the server validates role, stage and payload and returns the new canonical state."
        ),
        request_body=ProgressActionSerializer,
        responses={
            200: progress_response,
            400: transition_error_response,
            403: 'Forbidden',
            404: 'Not Found'
        }
    )
    def post(self, request, pk):
        application, role, error = get_participant_application(request, pk)
        if error:
            return error

        serializer = ProgressActionSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        data = serializer.validated_data

        application, result = services.perform_action(
            application,
            role,
            data['action'],
            request.user,
            review=data.get('review'),
            rating=data.get('rating'),
            payment_method=data.get('payment_method'),
            amount=data.get('amount'),
            notes=data.get('notes', ''),
        )
        if not result.ok:
            return transition_error(result)
        return Response(progress_payload(application, role))

class PaymentRetryView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(
        operation_description="Charge a released payment again after a failed attempt (job client only).",
        responses={200: progress_response, 400: transition_error_response, 403: 'Forbidden', 404: 'Not Found'}
    )
    def post(self, request, pk):
        application, role, error = get_participant_application(request, pk)
        if error:
            return error
        if role != 'client':
            return Response({"error": "Only the job's client can retry a payment"}, status=status.HTTP_403_FORBIDDEN)

        application, result = services.retry_payment(application)
        if not result.ok:
            return transition_error(result)
        return Response(progress_payload(application, role))
