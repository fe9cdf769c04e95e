from cleanlint.config import LintSettings
from cleanlint.rules.crud_naming import CrudNamingRule, leading_verb
from cleanlint.severity import Severity


def test_minority_verb_is_flagged(make_unit, settings):
    unit = make_unit(
        """
        def get_user(user_id):
            pass

        def get_order(order_id):
            pass

        def fetch_invoice(invoice_id):
            pass
        """
    )

    findings = CrudNamingRule().evaluate(unit, settings)

    assert len(findings) == 1
    assert findings[0].severity == Severity.WARNING
    assert "'fetch_invoice'" in findings[0].message
    assert "'get'" in findings[0].message
    assert findings[0].line == 7


def test_tie_is_reported_once_as_ambiguous(make_unit, settings):
    unit = make_unit(
        """
        def getUser(user_id):
            pass

        def fetchOrder(order_id):
            pass
        """
    )

    findings = CrudNamingRule().evaluate(unit, settings)

    assert len(findings) == 1
    assert findings[0].severity == Severity.INFO
    assert "Ambiguous" in findings[0].message
    assert findings[0].line == 1


def test_consistent_verbs_pass(make_unit, settings):
    unit = make_unit(
        """
        def get_user(user_id):
            pass

        def get_order(order_id):
            pass

        def delete_order(order_id):
            pass
        """
    )

    assert CrudNamingRule().evaluate(unit, settings) == []


def test_custom_verb_groups(make_unit):
    unit = make_unit(
        """
        def load_user():
            pass

        def load_order():
            pass

        def read_invoice():
            pass
        """
    )
    settings = LintSettings(crud_verb_groups=(("read", ("load", "read")),))

    findings = CrudNamingRule().evaluate(unit, settings)

    assert [finding.line for finding in findings] == [7]


def test_leading_verb_extraction():
    assert leading_verb("get_user") == "get"
    assert leading_verb("getUser") == "get"
    assert leading_verb("_fetch_rows") == "fetch"
    assert leading_verb("get") is None
