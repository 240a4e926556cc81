import pytest
import requests

from hubspot_property_tool.api.hubspot_client import HubSpotAPIClient, extract_error_message
from hubspot_property_tool.errors import HubSpotAPIError

from conftest import FakeResponse, FakeSession


def _page(start, count, after=None):
    body = {'results': [{'id': str(i)} for i in range(start, start + count)]}
    if after:
        body['paging'] = {'next': {'after': after}}
    return FakeResponse(200, body)


class TestPaginatedGet:

    def test_drains_all_pages_in_order(self, client, session):
        session.routes[('GET', '/automation/v4/flows')] = [
            _page(0, 100, after='c1'),
            _page(100, 100, after='c2'),
            _page(200, 37),
        ]

        items = client.paginated_get('/automation/v4/flows')

        assert len(items) == 237
        assert [item['id'] for item in items] == [str(i) for i in range(237)]

        calls = session.calls_to('/automation/v4/flows')
        assert len(calls) == 3
        assert all(c['params']['limit'] == 100 for c in calls)
        assert 'after' not in calls[0]['params']
        assert calls[1]['params']['after'] == 'c1'
        assert calls[2]['params']['after'] == 'c2'

    def test_static_params_and_results_key(self, client, session):
        session.routes[('GET', '/crm/v3/lists')] = FakeResponse(200, {'lists': [{'listId': 1}]})

        items = client.paginated_get('/crm/v3/lists', results_key='lists',
                                     params={'includeFilters': 'true'})

        assert items == [{'listId': 1}]
        assert session.calls[0]['params'] == {'includeFilters': 'true', 'limit': 100}

    def test_failed_page_propagates(self, client, session):
        session.routes[('GET', '/marketing/v3/forms')] = [
            _page(0, 100, after='c1'),
            FakeResponse(403, {'message': 'Missing scope forms'}),
        ]

        with pytest.raises(HubSpotAPIError) as exc:
            client.paginated_get('/marketing/v3/forms')

        assert exc.value.status_code == 403
        assert str(exc.value) == 'Missing scope forms'

    def test_empty_paging_section_stops(self, client, session):
        session.routes[('GET', '/x')] = FakeResponse(200, {'results': [], 'paging': {}})
        assert client.paginated_get('/x') == []
        assert len(session.calls) == 1


class TestRequestErrors:

    def test_errors_array_message(self, client, session):
        session.routes[('POST', '/crm/v3/properties/contacts')] = FakeResponse(
            400, {'errors': [{'message': 'Property name already exists'}]}
        )
        with pytest.raises(HubSpotAPIError) as exc:
            client.post('/crm/v3/properties/contacts', json_data={})
        assert exc.value.message == 'Property name already exists'
        assert exc.value.status_code == 400

    def test_non_json_error_body(self, client, session):
        session.routes[('GET', '/x')] = FakeResponse(502, None)
        with pytest.raises(HubSpotAPIError) as exc:
            client.get('/x')
        assert exc.value.status_code == 502
        assert '502' in str(exc.value)

    def test_transport_error_maps_to_500(self, client, session):
        session.routes[('GET', '/x')] = [requests.ConnectionError('connection refused')]
        with pytest.raises(HubSpotAPIError) as exc:
            client.get('/x')
        assert exc.value.status_code == 500
        assert 'connection refused' in str(exc.value)

    def test_delete_with_empty_body(self, client, session):
        session.routes[('DELETE', '/crm/v3/properties/contacts/foo')] = FakeResponse(204)
        assert client.delete('/crm/v3/properties/contacts/foo') is None


def test_bearer_header_is_set():
    session = FakeSession()
    HubSpotAPIClient('  abc123 ', session=session)
    assert session.headers['Authorization'] == 'Bearer abc123'


@pytest.mark.parametrize('body, expected', [
    ({'message': 'top'}, 'top'),
    ({'errors': [{'message': 'nested'}]}, 'nested'),
    ({'message': '', 'errors': []}, 'fallback'),
    (None, 'fallback'),
    ('oops', 'fallback'),
])
def test_extract_error_message(body, expected):
    assert extract_error_message(body, 'fallback') == expected
