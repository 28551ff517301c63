from generation_status.exceptions import flatten_issues


def test_flatten_nested_errors():
    detail = {
        'progress': ['Ensure this value is less than or equal to 100.'],
        'output': {'url': ['Enter a valid http(s) URL.']},
        'non_field_errors': ['Bad combination.'],
    }
    assert flatten_issues(detail) == [
        {'field': 'progress', 'message': 'Ensure this value is less than or equal to 100.'},
        {'field': 'output.url', 'message': 'Enter a valid http(s) URL.'},
        {'field': None, 'message': 'Bad combination.'},
    ]


def test_flatten_plain_list():
    assert flatten_issues(['Expected a JSON object.']) == [{'field': None, 'message': 'Expected a JSON object.'}]
