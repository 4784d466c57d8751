"""
Shared test helpers for the sensor test suites.

Provides plot embedding, chi-squared variance bounds, and small builders for
truth states and environments used across multiple test modules.
"""

import base64
import io

import numpy as np

from sensors.environment import CelestialSnapshot, GnssCatalog, TrueState
from sensors.quaternion import quaternion_from_axis_angle

EARTH_RADIUS = 6378137.0  # [m]
LEO_RADIUS = 7000.0e3  # [m]
GPS_RADIUS = 26560.0e3  # [m]


def attach_plot_to_html_report(request, fig, name):
    """
    Embed a matplotlib figure into the pytest HTML report as an inline PNG.

    The figure is rendered to an in memory byte buffer, Base64 encoded, and
    appended to the ``extra`` list on the current test node. If the
    pytest-html plugin is not installed the function does nothing, so tests
    still pass without it.

    :param request:  the pytest ``request`` fixture
    :param fig:      a ``matplotlib.figure.Figure`` to embed
    :param name:     a short label shown beside the image in the report
    """
    buf = io.BytesIO()
    fig.savefig(buf, format="png", dpi=160)

    html_plugin = request.config.pluginmanager.getplugin("html")
    if html_plugin is not None and hasattr(html_plugin, "extras"):
        png_b64 = base64.b64encode(buf.getvalue()).decode("ascii")
        extra = getattr(request.node, "extra", [])
        extra.append(html_plugin.extras.png(png_b64, name=name))
        request.node.extra = extra


def chi2_variance_bounds(n, confidence=0.99):
    """
    Chi-squared confidence interval ratio bounds for sample variance.

    Wilson Hilferty approximation:
        chi2_q  ~  nu * (1 - 2/(9*nu) +/- z * sqrt(2/(9*nu)))^3

    :param n:          number of samples
    :param confidence: two-sided confidence level (default 0.99)
    :return: (lower_ratio, upper_ratio) for s^2 / sigma^2
    """
    z_table = {0.99: 2.576, 0.95: 1.960, 0.90: 1.645}
    z = z_table.get(confidence, 2.576)

    nu = float(n - 1)
    a = 2.0 / (9.0 * nu)
    chi2_lo = nu * (1.0 - a - z * np.sqrt(a)) ** 3
    chi2_hi = nu * (1.0 - a + z * np.sqrt(a)) ** 3
    return chi2_lo / nu, chi2_hi / nu


def rotation_z(angle):
    return quaternion_from_axis_angle([0.0, 0.0, 1.0], angle)


def dark_sky():
    """
    Celestial snapshot with every body far from the +X body axis.

    Sun along -X, moon along -Y, earth along -Z at LEO distance: a star
    tracker looking along +X is clear of all three.
    """
    return CelestialSnapshot({
        "SUN": [-1.496e11, 0.0, 0.0],
        "EARTH": [0.0, 0.0, -LEO_RADIUS],
        "MOON": [0.0, -3.844e8, 0.0],
    })


def celestial_with(**overrides):
    """dark_sky() with some body positions replaced (keys: sun, earth, moon)."""
    positions = {
        "SUN": [-1.496e11, 0.0, 0.0],
        "EARTH": [0.0, 0.0, -LEO_RADIUS],
        "MOON": [0.0, -3.844e8, 0.0],
    }
    for name, position in overrides.items():
        positions[name.upper()] = position
    return CelestialSnapshot(positions)


def leo_state(position=(LEO_RADIUS, 0.0, 0.0), quaternion=(0.0, 0.0, 0.0, 1.0), omega=(0.0, 0.0, 0.0)):
    return TrueState(position_i=position, quaternion_i2b=quaternion, omega_b=omega)


def catalog_of(*entries):
    """GnssCatalog from (identifier, position) pairs."""
    return GnssCatalog(list(entries))
