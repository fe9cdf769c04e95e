from cleanlint.config import LintSettings
from cleanlint.rules.swallowed_error import SwallowedErrorRule
from cleanlint.severity import Severity


def test_log_only_handler_is_flagged(make_unit, settings):
    unit = make_unit(
        """
        try:
            save()
        except Exception as error:
            log(error)
        """
    )

    findings = SwallowedErrorRule().evaluate(unit, settings)

    assert len(findings) == 1
    assert findings[0].rule_id == "swallowed-error"
    assert findings[0].severity == Severity.ERROR
    assert findings[0].line == 3
    assert "'log()'" in findings[0].message


def test_log_and_reraise_is_not_flagged(make_unit, settings):
    unit = make_unit(
        """
        try:
            save()
        except Exception as error:
            log(error)
            raise
        """
    )

    assert SwallowedErrorRule().evaluate(unit, settings) == []


def test_log_and_return_error_value_is_not_flagged(make_unit, settings):
    unit = make_unit(
        """
        def store(record):
            try:
                save(record)
            except Exception as error:
                logger.error(error)
                return {"success": False, "error": str(error)}
        """
    )

    assert SwallowedErrorRule().evaluate(unit, settings) == []


def test_empty_handler_is_flagged(make_unit, settings):
    unit = make_unit(
        """
        try:
            save()
        except:
            pass
        """
    )

    findings = SwallowedErrorRule().evaluate(unit, settings)

    assert len(findings) == 1
    assert "bare except" in findings[0].message


def test_return_none_does_not_count_as_error_value(make_unit, settings):
    unit = make_unit(
        """
        def read(path):
            try:
                return open(path).read()
            except OSError:
                logger.warning("missing")
                return None
        """
    )

    assert len(SwallowedErrorRule().evaluate(unit, settings)) == 1


def test_handler_that_recovers_is_not_flagged(make_unit, settings):
    unit = make_unit(
        """
        try:
            value = int(text)
        except ValueError:
            value = 0
        """
    )

    assert SwallowedErrorRule().evaluate(unit, settings) == []


def test_severity_override_applies(make_unit):
    unit = make_unit(
        """
        try:
            save()
        except KeyError:
            pass
        """
    )
    settings = LintSettings(severity_overrides=(("swallowed-error", "warning"),))

    findings = SwallowedErrorRule().evaluate(unit, settings)

    assert findings[0].severity == Severity.WARNING
