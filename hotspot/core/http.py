from django.http import JsonResponse


def error_response(code, status=400, message=None, details=None, **extra):
    """JSON error envelope shared by every endpoint: {status, error: {code, message, ...}}."""
    error = {'code': code.value, 'message': message or code.message}
    if details is not None:
        error['details'] = details
    error.update(extra)
    return JsonResponse({'status': 'error', 'error': error}, status=status)
