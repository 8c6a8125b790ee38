from rest_framework import permissions


class HasProfile(permissions.BasePermission):
    """Allow authenticated users that carry the ``profile`` one-to-one (client or worker)."""
    profile = None

    def has_permission(self, request, view):
        if not request.user.is_authenticated:
            return False
        return hasattr(request.user, self.profile)

class IsClient(HasProfile):
    profile = 'client'
    message = 'Only clients can do this.'

class IsWorker(HasProfile):
    profile = 'worker'
    message = 'Only workers can do this.'
