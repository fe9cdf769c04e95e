from cleanlint.config import LintSettings
from cleanlint.rules.unsafe_query import UnsafeQueryRule
from cleanlint.severity import Severity


def test_concatenated_query_is_flagged(make_unit, settings):
    unit = make_unit('query("SELECT * FROM t WHERE id = " + id)\n')

    findings = UnsafeQueryRule().evaluate(unit, settings)

    assert len(findings) == 1
    assert findings[0].rule_id == "unsafe-query"
    assert findings[0].severity == Severity.ERROR
    assert "'query()'" in findings[0].message


def test_parameterized_query_is_not_flagged(make_unit, settings):
    unit = make_unit('query("SELECT * FROM t WHERE id = ?", [id])\n')

    assert UnsafeQueryRule().evaluate(unit, settings) == []


def test_fstring_format_and_percent_are_flagged(make_unit, settings):
    unit = make_unit(
        """
        def run(cursor, name, table):
            cursor.execute(f"SELECT * FROM users WHERE name = '{name}'")
            cursor.execute("DELETE FROM {} WHERE id = 1".format(table))
            cursor.execute("SELECT * FROM users WHERE name = '%s'" % name)
        """
    )

    findings = UnsafeQueryRule().evaluate(unit, settings)

    assert [finding.line for finding in findings] == [2, 3, 4]


def test_string_built_through_local_variable_is_flagged(make_unit, settings):
    unit = make_unit(
        """
        def find(cursor, user_id):
            sql = "SELECT * FROM users WHERE id = "
            sql += user_id
            cursor.execute(sql)
        """
    )

    findings = UnsafeQueryRule().evaluate(unit, settings)

    assert len(findings) == 1
    assert "'sql'" in findings[0].message
    assert "line 3" in findings[0].message


def test_reassigned_variable_is_not_flagged(make_unit, settings):
    unit = make_unit(
        """
        def find(cursor, user_id):
            sql = "SELECT * FROM users WHERE id = " + user_id
            sql = "SELECT * FROM users WHERE id = ?"
            cursor.execute(sql, (user_id,))
        """
    )

    assert UnsafeQueryRule().evaluate(unit, settings) == []


def test_constant_concatenation_is_not_flagged(make_unit, settings):
    unit = make_unit('query("SELECT * " + "FROM t")\n')

    assert UnsafeQueryRule().evaluate(unit, settings) == []


def test_sink_patterns_are_configurable(make_unit):
    unit = make_unit('shell_out("rm -rf " + path)\n')

    assert UnsafeQueryRule().evaluate(unit, LintSettings()) == []
    findings = UnsafeQueryRule().evaluate(unit, LintSettings(injection_sink_patterns=(r"shell_\w+",)))
    assert len(findings) == 1


def test_keyword_query_argument_is_checked(make_unit, settings):
    unit = make_unit('session.execute(sql="SELECT * FROM t WHERE id = " + key)\n')

    assert len(UnsafeQueryRule().evaluate(unit, settings)) == 1


def test_class_bodies_and_lambdas_are_scanned(make_unit, settings):
    unit = make_unit(
        """
        class Repo:
            table = "users"
            rows = db.query("SELECT * FROM users WHERE key = " + key)

        lookup = lambda key: cursor.execute("SELECT * FROM users WHERE key = " + key)
        """
    )

    findings = sorted(UnsafeQueryRule().evaluate(unit, settings), key=lambda finding: finding.sort_key)

    assert [finding.line for finding in findings] == [3, 5]
    assert "'query()'" in findings[0].message
    assert "'execute()'" in findings[1].message
