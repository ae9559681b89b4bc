import math

from flask import current_app


def success_response(data=None, message='Success'):
    return {
        'success': True,
        'message': message,
        'data': data,
    }


def error_response(message, details=None, include_details=None):
    """Error envelope; ``details`` only leaves the server when ERROR_DETAILS is on."""
    response = {
        'success': False,
        'error': message,
    }
    if include_details is None:
        include_details = current_app.config.get('ERROR_DETAILS', False)
    if details and include_details:
        response['details'] = details
    return response


def pagination_response(items, total_items, page, limit):
    total_pages = math.ceil(total_items / limit)
    return {
        'items': items,
        'pagination': {
            'currentPage': page,
            'totalPages': total_pages,
            'totalItems': total_items,
            'itemsPerPage': limit,
            'hasNextPage': page < total_pages,
            'hasPreviousPage': page > 1,
        },
    }
