"""
Pytest Configuration and HTML Report Hooks

This module configures the pytest test runner for the spacecraft sensor
project. It handles automatic HTML report generation with custom columns
for test metadata (description, goal, passing criteria) and embedded plot
images.

Tests describe themselves with the @pytest.mark.test_meta marker; the
hooks below copy those kwargs onto the report and render them next to the
plots attached by tests.helpers.attach_plot_to_html_report.
"""

import sys
from html import escape
from pathlib import Path

import pytest

# Resolve the project root directory (one level above the tests/ folder)
ROOT = Path(__file__).resolve().parents[1]

# Ensure the project root is on the Python import path so that the
# sensors package can be imported without installation
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def _report_name_from_args(args):
    """
    Determine the HTML report filename from the pytest command-line arguments.

    A single test file gives report_<file>.html (test_delay_buffer.py ->
    report_delay_buffer.html); a single test package directory such as
    tests/test_star_tracker gives report_star_tracker.html. Anything else
    falls back to report_all.html.

    :param args: List of command-line arguments passed to pytest.
    :return: Report filename string.
    """
    targets = []
    for arg in args:
        text = str(arg)

        # Skip flags/options (arguments starting with a dash)
        if text.startswith("-"):
            continue

        # Strip any ::test_name node suffix
        path = Path(text.split("::", 1)[0])
        if path.name.startswith("test_") and path.suffix in (".py", ""):
            targets.append(path)

    # Deduplicate by lowercased path string
    unique_targets = {str(p).lower(): p for p in targets}
    if len(unique_targets) == 1:
        target = next(iter(unique_targets.values()))
        sensor_name = target.stem.removeprefix("test_")
        if sensor_name:
            return f"report_{sensor_name}.html"

    return "report_all.html"


def pytest_configure(config):
    config.addinivalue_line(
        "markers",
        "test_meta(description, goal, passing_criteria): metadata rendered in the HTML report",
    )

    # Respect an explicit --html choice from the user
    user_set_html = any(str(arg).startswith("--html") for arg in config.invocation_params.args)
    if user_set_html or not config.pluginmanager.hasplugin("html"):
        return

    report_dir = ROOT / "tests" / "test_reports"
    report_dir.mkdir(parents=True, exist_ok=True)
    report_name = _report_name_from_args(config.invocation_params.args)

    # Tell pytest-html where to write the report
    config.option.htmlpath = str(report_dir / report_name)


@pytest.hookimpl(optionalhook=True)
def pytest_html_results_table_header(cells):
    cells.insert(3, '<th class="col-testmeta">Test Description</th>')
    cells.insert(4, '<th class="col-plot">Plot</th>')


def _format_test_meta(report):
    """
    Format test metadata (description, goal, passing criteria) as an HTML block.

    :param report: The pytest test report object.
    :return: HTML string containing the formatted metadata.
    """
    meta = getattr(report, "test_meta", None)
    if not meta:
        return '<div style="color:#666;">n/a</div>'

    # Escape all strings to prevent HTML injection
    description = escape(str(meta.get("description", "")))
    goal = escape(str(meta.get("goal", "")))
    passing = escape(str(meta.get("passing_criteria", "")))
    return (
        '<div style="min-width:340px;max-width:520px;line-height:1.35;">'
        f"<div><strong>Test Description:</strong> {description}</div>"
        f"<div><strong>Test Goal:</strong> {goal}</div>"
        f"<div><strong>Passing Criteria:</strong> {passing}</div>"
        "</div>"
    )


@pytest.hookimpl(optionalhook=True)
def pytest_html_results_table_row(report, cells):
    cells.insert(3, f'<td class="col-testmeta">{_format_test_meta(report)}</td>')

    images = []
    for extra in getattr(report, "extras", []):
        if extra.get("format_type") != "image":
            continue
        content = extra.get("content")
        if not content:
            continue
        images.append(
            f'<a href="{content}" target="_blank" rel="noopener noreferrer">'
            f'<img src="{content}" alt="plot" '
            f'style="max-width:320px;height:auto;display:block;margin:4px 0;cursor:zoom-in;" />'
            f"</a>"
        )

    if images:
        cells.insert(4, f'<td class="col-plot">{"".join(images)}</td>')
    else:
        cells.insert(4, '<td class="col-plot"></td>')


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """
    Attach test_meta marker kwargs and plot extras to the call-phase report.

    :param item: The pytest test item that just ran.
    :param call: The pytest CallInfo object for this test phase.
    """
    outcome = yield
    report = outcome.get_result()

    # Only process the "call" phase (not setup or teardown)
    if report.when != "call":
        return

    marker = item.get_closest_marker("test_meta")
    if marker:
        report.test_meta = {
            "description": marker.kwargs.get("description", ""),
            "goal": marker.kwargs.get("goal", ""),
            "passing_criteria": marker.kwargs.get("passing_criteria", ""),
        }

    item_extra = getattr(item, "extra", None)
    if not item_extra:
        return

    extras = getattr(report, "extras", [])
    extras.extend([dict(extra) for extra in item_extra])
    report.extras = extras
