# core/constants.py
JOB_STATUS_CHOICES = (
    ('open', 'Open'),              # Job is available for applications
    ('in_progress', 'In Progress'), # A worker has been accepted
    ('completed', 'Completed'),     # Job closed out by the worker
    ('cancelled', 'Cancelled'),    # Job was cancelled
    ('paused', 'Paused'),          # Client stopped taking applications
)

# One status per progress stage, in stage order (stage 1 is 'pending').
APPLICATION_PROGRESS_STATUSES = (
    'pending',
    'accepted',
    'in_progress',
    'work_completed',
    'payment_pending',
    'payment_successful',
    'feedback',
    'closed',
)

JOB_APPLICATION_STATUS_CHOICES = (
    ('pending', 'Pending'),                        # Worker applied, awaiting client response
    ('accepted', 'Accepted'),                      # Client accepted worker's application
    ('in_progress', 'In Progress'),                # Worker started the work
    ('work_completed', 'Work Completed'),          # Worker marked the work done
    ('payment_pending', 'Payment Pending'),        # Client released payment, charge in flight
    ('payment_successful', 'Payment Successful'),  # Charge settled
    ('feedback', 'Review & Feedback'),             # Client reviewed or worker acknowledged payment
    ('closed', 'Closed'),                          # Worker closed the job
    ('rejected', 'Rejected'),                      # Client rejected worker's application
    ('withdrawn', 'Withdrawn'),                    # Worker withdrew before a response
)

JOB_CATEGORY_CHOICES = (
    ('cleaning', 'Cleaning'),
    ('gardening', 'Gardening'),
    ('plumbing', 'Plumbing'),
    ('electrical', 'Electrical'),
    ('carpentry', 'Carpentry'),
    ('painting', 'Painting'),
    ('delivery', 'Delivery'),
    ('tutoring', 'Tutoring'),
    ('pet_care', 'Pet Care'),
    ('elderly_care', 'Elderly Care'),
    ('cooking', 'Cooking'),
    ('photography', 'Photography'),
    ('event_planning', 'Event Planning'),
    ('repair_services', 'Repair Services'),
    ('moving', 'Moving'),
    ('other', 'Other'),
)

BUDGET_TYPE_CHOICES = (
    ('fixed', 'Fixed'),
    ('hourly', 'Hourly'),
    ('negotiable', 'Negotiable'),
)

URGENCY_CHOICES = (
    ('low', 'Low'),
    ('medium', 'Medium'),
    ('high', 'High'),
    ('urgent', 'Urgent'),
)

PAYMENT_METHOD_CHOICES = (
    ('online', 'Online'),
    ('physical', 'Cash'),
)

TRANSACTION_STATUS_CHOICES = (
    ('pending', 'Pending'),
    ('completed', 'Completed'),
    ('failed', 'Failed'),
)
