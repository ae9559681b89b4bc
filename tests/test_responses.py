from responses import error_response, pagination_response, success_response


def test_success_envelope_defaults():
    assert success_response() == {'success': True, 'message': 'Success', 'data': None}
    assert success_response([1], 'Done')['data'] == [1]


def test_error_details_only_when_enabled(app):
    with app.app_context():
        assert error_response('Boom', 'trace') == {'success': False, 'error': 'Boom'}
        app.config['ERROR_DETAILS'] = True
        assert error_response('Boom', 'trace')['details'] == 'trace'


def test_error_details_explicit_flag():
    body = error_response('Boom', 'trace', include_details=True)
    assert body == {'success': False, 'error': 'Boom', 'details': 'trace'}


def test_pagination_flags():
    body = pagination_response(['a'], 25, 2, 12)
    assert body['items'] == ['a']
    assert body['pagination'] == {
        'currentPage': 2,
        'totalPages': 3,
        'totalItems': 25,
        'itemsPerPage': 12,
        'hasNextPage': True,
        'hasPreviousPage': True,
    }


def test_pagination_empty_result():
    p = pagination_response([], 0, 1, 12)['pagination']
    assert p['totalPages'] == 0
    assert p['hasNextPage'] is False
    assert p['hasPreviousPage'] is False


def test_pagination_last_page():
    p = pagination_response([], 24, 2, 12)['pagination']
    assert p['hasNextPage'] is False
    assert p['hasPreviousPage'] is True
