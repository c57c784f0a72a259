"""
Tests for the schema describe service.

Verifies:
- Entity name, label and columns come from the SQLAlchemy mapping.
- Field and field-set resolution, including failure modes.
- Read access decisions from the access policy.
"""

import pytest

from selector_kernel.exceptions import (
    UnknownEntityTypeError,
    UnknownFieldError,
    UnknownFieldSetError,
)
from selector_kernel.schema.describe import AccessPolicy, SchemaDescribe
from selector_kernel.schema.fields import FieldIdentifier, FieldSetDescriptor
from tests.sample_models import FIELD_SETS, Account, AsyncApexJob, Contact


class TestDescribe:
    def test_entity_name_is_table_name(self, schema):
        assert schema.entity_name(Account) == "Account"
        assert schema.entity_name(AsyncApexJob) == "AsyncApexJob"

    def test_label_defaults_to_class_name(self, schema):
        assert schema.entity_label(Account) == "Account"

    def test_label_override(self, schema):
        assert schema.entity_label(Contact) == "Contact Person"

    def test_fields_are_table_columns(self, schema):
        names = [f.name for f in schema.describe(Account).fields]
        assert names == [
            "Id",
            "Name",
            "CurrencyIsoCode",
            "BillingCity",
            "BillingCountry",
            "AnnualRevenue",
        ]

    def test_describe_is_cached(self, schema):
        assert schema.describe(Account) is schema.describe(Account)

    def test_unmapped_class_rejected(self, schema):
        class NotAnEntity:
            pass

        with pytest.raises(UnknownEntityTypeError) as exc_info:
            schema.describe(NotAnEntity)
        assert exc_info.value.entity_type == "NotAnEntity"

    def test_instance_rejected(self, schema):
        with pytest.raises(UnknownEntityTypeError):
            schema.describe(Account(Name="x"))


class TestFieldResolution:
    def test_resolves_names_and_attributes(self, schema):
        assert schema.field(Account, "Name") == FieldIdentifier("Name")
        assert schema.field(Account, Account.BillingCity).name == "BillingCity"

    def test_case_insensitive_match_returns_declared_spelling(self, schema):
        assert schema.field(Account, "billingcity").name == "BillingCity"
        assert schema.field(AsyncApexJob, "id").name == "Id"

    def test_unknown_field(self, schema):
        with pytest.raises(UnknownFieldError) as exc_info:
            schema.field(Account, "Nope")
        assert exc_info.value.entity_name == "Account"
        assert exc_info.value.code == "UNKNOWN_FIELD"

    def test_find_field_returns_none_for_missing_column(self, schema):
        assert schema.find_field(AsyncApexJob, "CurrencyIsoCode") is None
        assert schema.find_field(Account, "currencyisocode").name == "CurrencyIsoCode"

    def test_fields_preserve_order(self, schema):
        resolved = schema.fields(Account, ["Name", "Id"])
        assert [f.name for f in resolved] == ["Name", "Id"]


class TestFieldSets:
    def test_configured_field_set(self, schema):
        fs = schema.field_set(Account, "Billing")
        assert fs.name == "Billing"
        assert fs.entity == "Account"
        assert [f.name for f in fs] == ["BillingCity", "BillingCountry"]

    def test_descriptor_passes_through(self, schema):
        fs = FieldSetDescriptor(name="Adhoc", entity="Account", fields=(FieldIdentifier("Name"),))
        assert schema.field_set(Account, fs) is fs

    def test_unknown_field_set(self, schema):
        with pytest.raises(UnknownFieldSetError) as exc_info:
            schema.field_set(AsyncApexJob, "Billing")
        assert exc_info.value.entity_name == "AsyncApexJob"

    def test_bad_member_fails_on_describe(self):
        schema = SchemaDescribe(field_sets={"Account": {"Broken": ["Name", "Missing"]}})
        with pytest.raises(UnknownFieldError):
            schema.describe(Account)

    def test_other_entities_unaffected_by_field_sets(self):
        schema = SchemaDescribe(field_sets=FIELD_SETS)
        assert schema.describe(AsyncApexJob).field_sets == ()


class TestAccessPolicy:
    def test_everything_readable_by_default(self, schema):
        assert schema.is_readable(Account)
        assert schema.is_readable(AsyncApexJob)

    def test_denied_entity(self, restricted_schema):
        assert not restricted_schema.is_readable(Account)
        assert restricted_schema.is_readable(Contact)

    def test_readable_allow_list(self):
        policy = AccessPolicy(readable=frozenset({"Account"}))
        assert policy.can_read("Account")
        assert not policy.can_read("Contact")

    def test_denial_wins_over_grant(self):
        policy = AccessPolicy(readable=frozenset({"Account"}), denied=frozenset({"Account"}))
        assert not policy.can_read("Account")
