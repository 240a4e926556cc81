from hubspot_property_tool.analyzers.references import (
    extract_property_keys,
    extract_personalization_tokens,
    extract_text_references,
    extract_form_fields,
)


class TestPropertyKeys:

    def test_filter_property(self):
        assert extract_property_keys({'filterProperty': 'lead_status'}) == {'lead_status'}

    def test_uppercase_value_rejected(self):
        assert extract_property_keys({'propertyType': 'ENUMERATION'}) == set()

    def test_suffix_variants(self):
        item = {
            'property': 'a_one',
            'propertyName': 'b_two',
            'fromPropertyName': 'c3',
            'targetPROPERTY': 'd_four',
            'somePropertyname': 'e_five',
        }
        assert extract_property_keys(item) == {'a_one', 'b_two', 'c3', 'd_four', 'e_five'}

    def test_non_matching_keys_and_values(self):
        item = {
            'propertyType': 'string',      # key does not end in property/propertyName
            'properties': 'firstname',     # plural is not a match
            'property': 'Has Space',
            'propertyName': '1starts_with_digit',
            'filterProperty': 42,
            'otherProperty': None,
        }
        assert extract_property_keys(item) == set()

    def test_deeply_nested(self):
        item = {
            'actions': [
                {'fields': {'filters': [[{'property': 'hs_lead_status'}]]}},
                {'branches': [{'filterBranch': {'filters': [{'property': 'lifecyclestage'}]}}]},
            ]
        }
        assert extract_property_keys(item) == {'hs_lead_status', 'lifecyclestage'}

    def test_embedded_json_text_is_not_a_key(self):
        item = {'note': '{"property": "hidden_inside_text"}'}
        assert extract_property_keys(item) == set()


class TestPersonalizationTokens:

    def test_contact_token(self):
        text = {'body': '<p>Hi, your color is {{contact.favorite_color}}!</p>'}
        assert 'favorite_color' in extract_personalization_tokens(text)

    def test_multiple_tokens_and_sources(self):
        item = {
            'subject': '{{ contact.firstname }} at {{company.name}}',
            'content': {'widgets': [{'html': '{{deal.deal_stage_2}} {{owner_info.email}}'}]},
        }
        assert extract_personalization_tokens(item) == {
            'firstname', 'name', 'deal_stage_2', 'email'
        }

    def test_invalid_tokens_ignored(self):
        item = {'body': '{{Contact.Name}} {{contact}} {{contact.9lives}} {contact.single}'}
        assert extract_personalization_tokens(item) == set()

    def test_text_references_union(self):
        item = {
            'actions': [
                {'propertyName': 'lead_status'},
                {'body': 'Hello {{contact.favorite_color}}'},
            ]
        }
        assert extract_text_references(item) == {'lead_status', 'favorite_color'}


class TestFormFields:

    def test_current_version_with_dependents(self):
        form = {
            'fieldGroups': [
                {'fields': [
                    {'name': 'email'},
                    {
                        'name': 'country',
                        'dependentFields': [{
                            'dependentFieldFilters': [
                                {'dependentFormField': {
                                    'name': 'state',
                                    'dependentFields': [{
                                        'dependentFieldFilters': [
                                            {'dependentFormField': {'name': 'county'}}
                                        ]
                                    }],
                                }},
                            ],
                            'dependentField': {'name': 'postal_code'},
                        }],
                    },
                ]},
                {'fields': [{'name': 'Mixed_Case_Name'}]},
            ]
        }
        assert extract_form_fields(form) == {
            'email', 'country', 'state', 'county', 'postal_code', 'Mixed_Case_Name'
        }

    def test_legacy_flat_fields(self):
        form = {'fields': [{'name': 'firstname'}, {'name': 'lastname'}]}
        assert extract_form_fields(form) == {'firstname', 'lastname'}

    def test_legacy_row_major_fields(self):
        form = {'fields': [
            [{'name': 'firstname'}, {'name': 'lastname'}],
            [{'name': 'phone'}],
        ]}
        assert extract_form_fields(form) == {'firstname', 'lastname', 'phone'}

    def test_legacy_dependent_fields_list(self):
        form = {'formFieldGroups': [{'fields': [{
            'name': 'interest',
            'dependentFields': [{'fields': [{'name': 'interest_detail'}]}],
            'dependentFieldFilters': [{'dependentFormField': {'name': 'budget'}}],
        }]}]}
        assert extract_form_fields(form) == {'interest', 'interest_detail', 'budget'}

    def test_both_versions_union(self):
        form = {
            'fieldGroups': [{'fields': [{'name': 'email'}]}],
            'fields': [[{'name': 'legacy_field'}]],
        }
        assert extract_form_fields(form) == {'email', 'legacy_field'}

    def test_garbage_is_ignored(self):
        form = {
            'fieldGroups': [None, 'x', {'fields': 'nope'}, {'fields': [None, {'name': ''}, 3]}],
            'fields': {'not': 'a list'},
        }
        assert extract_form_fields(form) == set()
        assert extract_form_fields(None) == set()
        assert extract_form_fields([{'name': 'x'}]) == set()
