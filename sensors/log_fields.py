"""
Column naming for sensor telemetry.

header() and value() on every sensor return flat, ordered lists; these
helpers keep the column names consistent between sensors, e.g.
``stt0_measured_quaternion_i2c(3)`` or ``gnss0_position_eci(0)[m]``.
"""


def scalar_fields(name, unit=""):
    suffix = f"[{unit}]" if unit else ""
    return [f"{name}{suffix}"]


def vector_fields(name, frame, unit="", size=3):
    suffix = f"[{unit}]" if unit else ""
    return [f"{name}_{frame}({i}){suffix}" for i in range(size)]


def quaternion_fields(name, frame):
    return vector_fields(name, frame, size=4)


def flatten_values(*parts):
    """Flatten scalars and array-likes into one list of floats."""
    values = []
    for part in parts:
        if hasattr(part, "__len__"):
            values.extend(float(v) for v in part)
        else:
            values.append(float(part))
    return values
