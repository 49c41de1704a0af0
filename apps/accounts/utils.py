def get_client_ip(request):
    """Client address, honouring the first hop of X-Forwarded-For."""
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR', '')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR') or None


def get_user_agent(request):
    return request.META.get('HTTP_USER_AGENT', '')
