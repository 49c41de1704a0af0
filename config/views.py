from django.http import JsonResponse


def index(request):
    """Landing endpoint, the target of every route-gate redirect."""
    return JsonResponse({
        'name': 'Church Expenses',
        'status': 'ok',
    })


def health_check(request):
    """Liveness check."""
    return JsonResponse({'status': 'healthy'})


def error_404(request, exception):
    """Custom 404 handler."""
    return JsonResponse({
        'error': 'Not found',
        'status': 404
    }, status=404)


def error_500(request):
    """Custom 500 handler."""
    return JsonResponse({
        'error': 'Internal server error',
        'status': 500
    }, status=500)
