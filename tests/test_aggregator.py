import pytest

from hubspot_property_tool.analyzers.aggregator import UsageAggregator, ScanResult
from hubspot_property_tool.analyzers.usage import SourceKind
from hubspot_property_tool.extractors.workflows import WorkflowsExtractor
from hubspot_property_tool.extractors.forms import FormsExtractor
from hubspot_property_tool.extractors.lists import ListsExtractor
from hubspot_property_tool.extractors.reports import ReportsExtractor

from conftest import FakeResponse

WORKFLOWS = {'results': [
    {
        'id': '101',
        'name': 'Nurture',
        'actions': [
            {'type': 'SET_PROPERTY', 'propertyName': 'lead_status'},
            {'type': 'SEND_EMAIL', 'body': 'Hi, you like {{contact.favorite_color}}'},
        ],
    },
    {
        'id': '102',
        'actions': [
            {'filterProperty': 'lead_status'},
            {'propertyName': 'lead_status'},
        ],
    },
]}

FORMS = {'results': [
    {'id': 'f1', 'name': 'Contact us', 'fieldGroups': [{'fields': [{'name': 'email'},
                                                                  {'name': 'lead_status'}]}]},
    {'id': 'f2', 'fieldGroups': [{'fields': [{'name': 'email'}]}]},
]}

LISTS = {'lists': [
    {'listId': 7, 'name': 'Hot leads',
     'filterBranch': {'filters': [{'property': 'lead_status', 'operation': {'operator': 'IS_EQUAL_TO'}}]}},
    {'listId': 8, 'filterBranch': {'filters': [{'property': 'budget_range'}]}},
]}

DEAL_PIPELINES = {'results': [
    {'id': 'default', 'label': 'Sales',
     'stages': [{'label': 'Won', 'metadata': {'requiredProperty': 'close_reason'}}]},
]}

TICKET_PIPELINES = {'results': [{'id': '0', 'stages': []}]}

EMAILS = {'results': [
    {'id': 'e1', 'name': 'Welcome', 'content': {'html': 'Dear {{contact.firstname}}'}},
    {'id': 'e2', 'subject': 'Your {{contact.favorite_color}} gift'},
]}

REPORTS = {'objects': [
    {'id': 55, 'name': 'Pipeline by source', 'config': {'groupByProperty': 'lead_source',
                                                        'propertyType': 'ENUMERATION'}},
]}


def _all_routes():
    return {
        ('GET', '/automation/v4/flows'): FakeResponse(200, WORKFLOWS),
        ('GET', '/marketing/v3/forms'): FakeResponse(200, FORMS),
        ('GET', '/crm/v3/lists'): FakeResponse(200, LISTS),
        ('GET', '/crm/v3/pipelines/deals'): FakeResponse(200, DEAL_PIPELINES),
        ('GET', '/crm/v3/pipelines/tickets'): FakeResponse(200, TICKET_PIPELINES),
        ('GET', '/marketing/v3/emails'): FakeResponse(200, EMAILS),
        ('GET', '/reports/v2/reports'): FakeResponse(200, REPORTS),
    }


@pytest.fixture
def full_scan(client, session):
    session.routes.update(_all_routes())
    return UsageAggregator(client).scan()


def test_identifier_sets_per_source(full_scan):
    refs = full_scan.references
    assert refs[SourceKind.WORKFLOWS] == {'lead_status', 'favorite_color'}
    assert refs[SourceKind.FORMS] == {'email', 'lead_status'}
    assert refs[SourceKind.LISTS] == {'lead_status', 'budget_range'}
    assert refs[SourceKind.PIPELINES] == {'close_reason'}
    assert refs[SourceKind.MARKETING_EMAILS] == {'firstname', 'favorite_color'}
    assert refs[SourceKind.REPORTS] == {'lead_source'}
    assert full_scan.warnings == []
    assert full_scan.failed_sources == set()


def test_counts(full_scan):
    assert full_scan.counts == {
        SourceKind.WORKFLOWS: 2,
        SourceKind.FORMS: 2,
        SourceKind.LISTS: 2,
        SourceKind.PIPELINES: 2,
        SourceKind.MARKETING_EMAILS: 2,
        SourceKind.REPORTS: 1,
    }


def test_provenance_names_and_placeholders(full_scan):
    lead_status = full_scan.provenance['lead_status']
    assert lead_status[SourceKind.WORKFLOWS] == ['Nurture', 'Workflow 102']
    assert lead_status[SourceKind.FORMS] == ['Contact us']
    assert lead_status[SourceKind.LISTS] == ['Hot leads']

    assert full_scan.provenance['email'][SourceKind.FORMS] == ['Contact us', 'f2']
    assert full_scan.provenance['budget_range'][SourceKind.LISTS] == ['8']
    assert full_scan.provenance['close_reason'][SourceKind.PIPELINES] == ['Sales']
    assert full_scan.provenance['favorite_color'][SourceKind.MARKETING_EMAILS] == ['e2']
    assert full_scan.provenance['lead_source'][SourceKind.REPORTS] == ['Pipeline by source']


def test_provenance_is_deduplicated(full_scan):
    # workflow 102 references lead_status twice; listed once
    names = full_scan.provenance['lead_status'][SourceKind.WORKFLOWS]
    assert names.count('Workflow 102') == 1


def test_failed_source_becomes_single_warning(client, session):
    routes = _all_routes()
    routes[('GET', '/marketing/v3/forms')] = FakeResponse(403, {'message': 'This app lacks the forms scope'})
    session.routes.update(routes)

    scan = UsageAggregator(client).scan()

    assert len(scan.warnings) == 1
    assert scan.warnings[0].source == SourceKind.FORMS
    assert str(scan.warnings[0]).startswith('Forms:')
    assert 'forms scope' in str(scan.warnings[0])
    assert scan.failed_sources == {SourceKind.FORMS}
    assert scan.references[SourceKind.FORMS] == set()

    for kind in SourceKind:
        if kind != SourceKind.FORMS:
            assert scan.references[kind], kind

    assert scan.to_dict()['warnings'] == [str(scan.warnings[0])]


def test_failure_mid_pagination_discards_partial_source(client, session):
    session.routes[('GET', '/automation/v4/flows')] = [
        FakeResponse(200, {'results': [{'id': '1', 'propertyName': 'early'}],
                           'paging': {'next': {'after': 'x'}}}),
        FakeResponse(500, {'message': 'boom'}),
    ]
    scan = UsageAggregator(client, extractors=[WorkflowsExtractor]).scan()

    assert scan.references[SourceKind.WORKFLOWS] == set()
    assert SourceKind.WORKFLOWS not in scan.counts
    assert [str(w) for w in scan.warnings] == ['Workflows: boom']


def test_every_source_failing_still_returns(client, session):
    scan = UsageAggregator(client).scan()
    assert len(scan.warnings) == 6
    assert scan.failed_sources == set(SourceKind)


def test_raw_items_saved(client, session, tmp_path):
    session.routes.update(_all_routes())
    UsageAggregator(client, extractors=[FormsExtractor], raw_output_dir=tmp_path).scan()
    assert (tmp_path / 'forms.json').exists()


def test_to_dict_shape(full_scan):
    data = full_scan.to_dict()
    assert data['workflows'] == ['favorite_color', 'lead_status']
    assert data['marketingEmails'] == ['favorite_color', 'firstname']
    assert data['usageSources']['lead_status']['forms'] == ['Contact us']
    assert data['counts']['reports'] == 1
    assert data['warnings'] == []


def test_record_dedup_directly():
    result = ScanResult()
    result.record(SourceKind.LISTS, 'A', {'x'})
    result.record(SourceKind.LISTS, 'A', {'x', 'y'})
    result.record(SourceKind.LISTS, 'B', {'x'})
    assert result.provenance['x'][SourceKind.LISTS] == ['A', 'B']
    assert result.provenance['y'][SourceKind.LISTS] == ['A']


def test_lists_request_includes_filters(client, session):
    session.routes.update(_all_routes())
    UsageAggregator(client, extractors=[ListsExtractor]).scan()

    calls = session.calls_to('/crm/v3/lists')
    assert len(calls) == 1
    assert calls[0]['params'] == {'includeFilters': 'true', 'limit': 100}


def test_reports_fetched_once_with_cap(client, session):
    session.routes.update(_all_routes())
    UsageAggregator(client, extractors=[ReportsExtractor]).scan()

    calls = session.calls_to('/reports/v2/reports')
    assert len(calls) == 1
    assert calls[0]['params'] == {'limit': 300}


class ExplodingWorkflows(WorkflowsExtractor):
    def extract_references(self, item):
        if item.get('id') == '102':
            raise ValueError('unexpected workflow shape')
        return super().extract_references(item)


def test_extraction_failure_discards_whole_source(client, session):
    session.routes.update(_all_routes())
    scan = UsageAggregator(client, extractors=[ExplodingWorkflows, FormsExtractor]).scan()

    assert scan.references[SourceKind.WORKFLOWS] == set()
    assert SourceKind.WORKFLOWS not in scan.provenance.get('lead_status', {})
    assert scan.to_dict()['workflows'] == []
    assert scan.failed_sources == {SourceKind.WORKFLOWS}
    assert [str(w) for w in scan.warnings] == ['Workflows: unexpected workflow shape']
    assert scan.references[SourceKind.FORMS] == {'email', 'lead_status'}
